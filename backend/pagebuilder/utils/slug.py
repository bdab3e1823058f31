import re
import unicodedata


def slugify(text: str) -> str:
    """
    Convert a title into a URL-safe slug.

    "Copy of Spring Sale!" -> "copy-of-spring-sale"
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", str(text))
    text = text.encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^\w\s-]", "", text.lower())
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")
