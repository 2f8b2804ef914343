import sys

from oneuptime.jobs.runner import main

sys.exit(main())
