"""
Command-line tokenizer.
"""

_WHITESPACE = " \t\n"


def split_command_line(line: str) -> list[str]:
    """
    Split a command line into arguments.

    Unquoted whitespace separates arguments. Single and double quotes group
    text; a backslash escapes the next character inside double quotes only.
    An unterminated quote still yields the text collected so far.

    Example:
        >>> split_command_line('ls -a "my file.txt"')
        ['ls', '-a', 'my file.txt']
    """
    args = []
    buf = []
    in_single = in_double = False
    i = 0

    while i < len(line):
        c = line[i]
        if in_single:
            if c == "'":
                in_single = False
            else:
                buf.append(c)
        elif in_double:
            if c == '"':
                in_double = False
            elif c == "\\" and i + 1 < len(line):
                i += 1
                buf.append(line[i])
            else:
                buf.append(c)
        elif c in _WHITESPACE:
            if buf:
                args.append("".join(buf))
                buf = []
        elif c == "'":
            in_single = True
        elif c == '"':
            in_double = True
        else:
            buf.append(c)
        i += 1

    if buf or in_single or in_double:
        args.append("".join(buf))
    return args
