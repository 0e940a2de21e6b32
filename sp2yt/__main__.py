import sys

from sp2yt.sync import main

sys.exit(main())
