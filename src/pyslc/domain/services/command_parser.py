"""Prefix-based command parsing."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParsedCommand:
    """A command name and its argument tokens."""

    command: str
    arguments: tuple[str, ...] = ()


def split_tokens(content: str) -> list[str]:
    """Split on single spaces, dropping trailing empty tokens.

    Consecutive spaces still produce empty tokens in the middle, so
    "a  b" gives ["a", "", "b"].
    """
    tokens = content.split(" ")
    while tokens and tokens[-1] == "":
        tokens.pop()
    return tokens


def parse_command(
    content: str,
    prefix: str,
    *,
    drop_last_argument: bool = True,
) -> ParsedCommand | None:
    """Parse message content into a command.

    Args:
        content: Message text.
        prefix: Command prefix, e.g. "!".
        drop_last_argument: Leave the final token out of the arguments.
            Bots already deployed on the platform rely on this, so
            "!ban alice spam" yields arguments ("alice",).

    Returns:
        The parsed command, or None if the content lacks the prefix.
    """
    if not prefix or not content.startswith(prefix):
        return None

    tokens = split_tokens(content[len(prefix) :])
    if len(tokens) <= 1:
        return ParsedCommand(command=tokens[0] if tokens else "")

    command = tokens[0]

    end = len(tokens) - 1 if drop_last_argument else len(tokens)
    return ParsedCommand(command=command, arguments=tuple(tokens[1:end]))
