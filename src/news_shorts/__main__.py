import sys

from news_shorts.cli import main

sys.exit(main())
