import os


def derive_names(path, prefix="", suffix="", taken_prefix="", taken_suffix=""):
    """Return the emoji name and the fallback taken name for a file path"""
    base_name = os.path.basename(path)
    # Everything from the last dot is the extension, so ".DS_Store" has an empty stem.
    stem, dot, _ = base_name.rpartition(".")
    if dot:
        base_name = stem
    # Colons delimit emoji names. Some filesystems also report "/73.jpg" as ":73.jpg".
    sanitized = base_name.replace(":", "")
    name = f"{prefix}{sanitized}{suffix}"
    return name, f"{taken_prefix}{name}{taken_suffix}"
