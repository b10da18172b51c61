"""File extension classification."""

# Fixed allow-list of extensions whose content is decoded and counted.
ANALYZABLE_EXTENSIONS = frozenset({"java", "txt", "md", "html", "css", "js"})


def extract_extension(filename: str) -> str:
    """Return the lowercase text after the last dot, or '' if there is none.
    
    Examples:
        - 'Main.JAVA' -> 'java'
        - 'archive.tar.gz' -> 'gz'
        - 'README' -> ''
        - 'notes.' -> ''
    """
    _, dot, suffix = filename.rpartition(".")
    if not dot:
        return ""
    return suffix.lower()


def classify(filename: str) -> tuple[str, bool]:
    """Classify a file by its extension.
    
    Args:
        filename: Base name of the file
        
    Returns:
        Tuple of (extension, analyzable)
    """
    extension = extract_extension(filename)
    return extension, extension in ANALYZABLE_EXTENSIONS
