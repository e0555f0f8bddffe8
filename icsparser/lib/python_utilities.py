## UTF-8 byte order mark, some producers put it in front of BEGIN:VCALENDAR
BOM = "\ufeff"


def to_normal_str(text):
    """
    Make sure we return a normal string, no matter if we were given
    bytes or str.  Line endings are normalized to LF and a leading
    byte order mark is dropped.
    """
    if text is None:
        return text
    if not isinstance(text, str):
        text = text.decode("utf-8", errors="replace")
    if text.startswith(BOM):
        text = text[1:]
    text = text.replace("\r\n", "\n")
    return text
