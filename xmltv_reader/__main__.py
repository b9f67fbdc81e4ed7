import sys

from xmltv_reader.main import main


if __name__ == "__main__":
    sys.exit(main())
