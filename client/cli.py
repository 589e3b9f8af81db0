"""
CLI Module
Handles command-line chat input
"""

from prompt_toolkit import PromptSession

from client.commands import handle_command, get_commands_list

WELCOME_MESSAGE = "Welcome to ChatBot! Type a message to start a conversation (:commands for help)."
EXIT_COMMANDS = (":quit", ":exit")


def list_commands():
    """Print available CLI commands"""
    for line in get_commands_list():
        print(line)
    print(":quit - Save and exit")


async def cli_input_loop(session, logger, http_client=None):
    """Read user input until EOF / Ctrl+C / :quit"""
    prompt_session = PromptSession()
    print(WELCOME_MESSAGE)

    while True:
        try:
            query = (await prompt_session.prompt_async("> ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\n👋 Exiting.")
            break

        if not query:
            continue

        if query in EXIT_COMMANDS:
            print("👋 Exiting.")
            break

        if query == ":commands":
            list_commands()
            continue

        if query.startswith(":"):
            handled, response = await handle_command(query, session, http_client=http_client)
            if handled:
                if response:
                    print(response)
                continue

        logger.info(f"💬 Received query: '{query}'")
        print("\n" + session.ask(query) + "\n")
