"""Allow ``python -m cliweb``."""

from cliweb.app import main

main()
