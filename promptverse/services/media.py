_URL_PREFIXES = ("http://", "https://")


def resolve_image_url(ref: str, base_url: str) -> str:
    """
    Expande uma referência de imagem.
    URLs absolutas voltam como estão; identificadores viram sufixo do base_url.
    """
    if not ref:
        return ""
    if ref.startswith(_URL_PREFIXES):
        return ref
    clean_id = ref[1:] if ref.startswith("/") else ref
    return f"{base_url.rstrip('/')}/{clean_id}"
