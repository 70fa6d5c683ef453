"""Command-line interface for curriculum-retrieval."""

from __future__ import annotations

import click

from .admin import admin
from .contribute import contribute
from .info import info
from .recall import recall


@click.group()
@click.version_option(package_name="curriculum-retrieval")
def main():
    """Curriculum Retrieval - keyword retrieval over textbook chunks.

    Commands are organized into four groups:

    \b
      admin       Database setup, import and statistics
      contribute  Add and remove boards, books, chapters and chunks
      info        List boards and books
      recall      Retrieve and view chunks
    """
    pass


# Register command groups
main.add_command(admin)
main.add_command(contribute)
main.add_command(info)
main.add_command(recall)


if __name__ == "__main__":
    main()
