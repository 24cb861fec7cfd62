"""Strip protocol header and footer lines from message text."""


def strip_header_line(text: str) -> str:
    """Drop a leading ``!<tag> ...`` header from a user message.

    Used when retrying a message: the body becomes the new draft and gets a
    fresh header on send. Text without a header is returned unchanged.
    """
    lines = text.split("\n")
    if not lines or not lines[0].strip().startswith("!<"):
        return text
    return "\n".join(lines[1:]).strip()


def strip_header_footer(text: str) -> str:
    """Drop the ``<tag>`` line and ``[Version=...]`` footer from a reply.

    Used for copying the readable body of an assistant reply.
    """
    lines = text.splitlines()

    if lines:
        first = lines[0].strip()
        if first.startswith("<") and first.endswith(">"):
            lines = lines[1:]

    if lines and lines[-1].strip().startswith("[Version="):
        lines = lines[:-1]

    return "\n".join(lines).strip()
