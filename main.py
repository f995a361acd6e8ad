from argosy import *


class Cleanup(Provider):
    """
    Clean up caches and tables
    """
    prog = "cleanup"

    tables = Argument(list, required=True, descr="Tables to clean up")
    keep = Argument(int, default=0, descr="Rows to keep per table")
    cache = Argument(mask="--clean-*", descr="Caches to clean up")

    def clean_action(self):
        self.trace("Bound values", dict(self.bindings))
        self.echo("Cleaning %s (keeping %s rows)", self.tables, self.keep)
        if self.cache:
            self.echo("Clearing %s", [key.lstrip("-") for key in self.cache])


if __name__ == '__main__':
    launch(Cleanup)
