import sys

from urlconfig.main import main

sys.exit(main())
