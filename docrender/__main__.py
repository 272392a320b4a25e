"""Allow ``python -m docrender``."""

from docrender.pipeline import main

main()
