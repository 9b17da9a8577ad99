"""
Image Encoding
==============

Pillow-based transcoding of captured PNG bytes into the requested output
format, and stitching of multi-page rasters.
"""

import io
from typing import List

from PIL import Image  # type: ignore

from docshot.config.logging import get_logger
from docshot.models.schemas import OutputFormat

logger = get_logger(__name__)

_WHITE = (255, 255, 255)


def _flatten(image: Image.Image) -> Image.Image:
    """Composite an image with alpha onto white, returning RGB."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, _WHITE)
        background.paste(rgba, mask=rgba.split()[3])
        return background
    return image.convert("RGB")


def transcode(
    png_bytes: bytes, fmt: OutputFormat, quality: int = 90, transparent: bool = False
) -> bytes:
    """
    Convert PNG bytes to another output format.

    Args:
        png_bytes: Source PNG image
        fmt: Target format
        quality: Encoder quality for JPEG and WebP (0-100)
        transparent: Keep the alpha channel where the format allows it

    Returns:
        Encoded bytes
    """
    if fmt is OutputFormat.PNG:
        return png_bytes

    image = Image.open(io.BytesIO(png_bytes))
    output = io.BytesIO()

    if fmt is OutputFormat.JPEG:
        _flatten(image).save(output, format="JPEG", quality=quality, optimize=True)
    elif fmt is OutputFormat.WEBP:
        if not transparent:
            image = _flatten(image)
        elif image.mode not in ("RGBA", "RGB"):
            image = image.convert("RGBA")
        image.save(output, format="WEBP", quality=quality, method=4)
    elif fmt is OutputFormat.PDF:
        _flatten(image).save(output, format="PDF", resolution=96.0)
    else:
        raise ValueError(f"Unsupported output format: {fmt}")

    encoded = output.getvalue()
    logger.debug(
        "Image transcoded",
        target=fmt.value,
        original_size=len(png_bytes),
        encoded_size=len(encoded),
    )
    return encoded


def stack_vertically(page_images: List[bytes]) -> bytes:
    """Stitch PNG page rasters top to bottom into one PNG."""
    if not page_images:
        raise ValueError("No pages to stack")
    if len(page_images) == 1:
        return page_images[0]

    pages = [Image.open(io.BytesIO(data)).convert("RGBA") for data in page_images]
    width = max(page.width for page in pages)
    height = sum(page.height for page in pages)

    canvas = Image.new("RGBA", (width, height), _WHITE + (255,))
    offset = 0
    for page in pages:
        canvas.paste(page, (0, offset))
        offset += page.height

    output = io.BytesIO()
    canvas.save(output, format="PNG", optimize=True)
    return output.getvalue()
