from exifmv.cli import run

run()
