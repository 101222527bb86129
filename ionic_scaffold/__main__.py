"""Allow ``python -m ionic_scaffold``."""

from ionic_scaffold.pipeline import main

main()
