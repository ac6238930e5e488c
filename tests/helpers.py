# tests/helpers.py - shared upload payloads

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64
GIF_BYTES = b"GIF89a" + b"\x00" * 64


def image_files(count, data=PNG_BYTES, name="photo.png", mime="image/png"):
    return [("images", (f"{i}-{name}", data, mime)) for i in range(count)]
