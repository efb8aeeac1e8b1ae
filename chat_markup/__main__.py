"""Package entry point for ``python -m chat_markup``.

WHY: Writers preview how a chat message will look without installing
the console scripts: ``python -m chat_markup "*waves* [SEES: a dog]"``
prints the display markup, ``--user`` switches to the user's span class
and ``--transcript chat.json`` renders a whole exported conversation.
Front-end developers run ``python -m chat_markup --serve`` to get the
render API on CHAT_MARKUP_API_HOST:CHAT_MARKUP_API_PORT.

HOW: ``--serve`` anywhere on the command line hands over to
server.app.run_api(); every other invocation goes to cli.main(), which
parses the remaining flags itself.

RULES:
- ``--serve`` ignores the other arguments
- Both paths exit 1 with an "Error: ..." line on bad configuration
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from chat_markup.server.app import run_api
        run_api()
    else:
        from chat_markup.cli import main
        main()
