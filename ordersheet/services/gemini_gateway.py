import json
from io import BytesIO
from typing import Any

import google.generativeai as genai
from loguru import logger
from PIL import Image, ImageOps

from ..core.config import settings
from ..models.inventory import ExtractedRow, ExtractionResult

EXTRACTION_FAILED_MESSAGE = "Failed to extract data from the invoice. Please try again."


class ExtractionError(Exception):
    """Raised for any failure while asking the model to read a sheet"""

    def __init__(self, message: str = EXTRACTION_FAILED_MESSAGE):
        super().__init__(message)


INVOICE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "vendorName": {
            "type": "STRING",
            "description": "The printed header text found at the EXTREME top-left of the page (e.g. 'Asian Vegetables'). Strictly IGNORE handwritten notes.",
        },
        "items": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "description": {
                        "type": "STRING",
                        "description": "The printed item name found in the Description column.",
                    },
                    "column1_inStock": {
                        "type": "NUMBER",
                        "description": "The handwritten number in the FIRST column (Far Left). This is 'In Stock'. Watch out for scribbles.",
                    },
                    "column2_par": {
                        "type": "NUMBER",
                        "description": "The handwritten number in the SECOND column (PAR). Return 0 if empty.",
                    },
                    "column3_order": {
                        "type": "NUMBER",
                        "description": "The handwritten number in the THIRD column (Order), located immediately to the left of the Description. DO NOT confuse with First Column.",
                    },
                    "column4_price": {
                        "type": "NUMBER",
                        "description": "The number found to the right of the Description. STRICTLY IGNORE columns labeled 'lbs', 'Weight', or 'Oz'. Only return a number if it is a monetary Price/Cost. Default to 0.",
                    },
                },
                "required": ["description"],
            },
        },
    },
}

EXTRACTION_PROMPT = """Analyze this inventory sheet/invoice image to extract data for a spreadsheet.

### 1. VENDOR NAME (EXTREME TOP LEFT)
- **HIGHEST PRIORITY:** The Vendor Name is the **FIRST PRINTED TEXT** located at the **EXTREME TOP-LEFT CORNER** of the page.
- Examples of Printed Titles: "Asian Vegetables", "General Produce", "Frozen Goods".
- **STRICTLY IGNORE** any handwritten text (names of people, dates, circled notes) written next to the printed title.
- If there is both printed text and handwritten text at the top, **ONLY** extract the printed text.

### 2. HANDWRITTEN NUMBERS (CRITICAL)
- This document contains **Handwritten Digits**. Accuracy is paramount.
- **0 (Zero):** Can be a circle, a loop, a dot, or a crossed circle.
- **1 (One):** Often a simple vertical line.
- **7 (Seven):** May have a horizontal crossbar.
- **Empty Cells:** Interpret as 0.
- If a number is scribbled out or corrected, look for the clear final number.

### 3. COLUMN MAPPING (Left to Right)
1. **In Stock** (Far Left Column): Handwritten numbers.
2. **PAR** (Second Column): Often blank/empty.
3. **Order** (Third Column): Handwritten numbers. **This column is immediately to the left of the Item Description.**
4. **Description** (Fourth Column): Printed English text.
5. **Price** (Right Side): Look for currency columns. **STRICTLY IGNORE 'lbs', 'Weight', or 'Oz' columns.** If the only number to the right is weight, return 0 for Price.

### ROW EXTRACTION RULES
- Extract every row that has a Printed Description.
- Map the handwritten number on the far left to 'inStock'.
- Map the handwritten number just before the text to 'order'.
- **Do not swap Stock and Order columns.**"""

MOCK_RESPONSE = {
    "vendorName": "Asian Vegetables",
    "items": [
        {"description": "Rice", "column1_inStock": 3, "column2_par": 0, "column3_order": 0, "column4_price": 0},
        {"description": "Bok Choy", "column1_inStock": 2, "column2_par": 0, "column3_order": 4, "column4_price": 1.75},
        {"description": "Ginger", "column1_inStock": 0, "column2_par": 6, "column3_order": 0, "column4_price": 3.5},
    ],
}


def prepare_image(file_bytes: bytes, mime_type: str) -> tuple[bytes, str]:
    """
    Downscale photos before upload.

    Phone photos are often 10+ MB; the longer side is capped at
    IMAGE_MAX_DIMENSION and the result re-encoded as JPEG. Documents (PDF)
    pass through untouched, and so does any image Pillow cannot read.
    """
    if not mime_type or not mime_type.startswith("image/"):
        return file_bytes, mime_type

    try:
        with Image.open(BytesIO(file_bytes)) as img:
            # Phones store portrait shots landscape plus an Orientation tag
            img = ImageOps.exif_transpose(img)
            img = img.convert("RGB")
            max_dim = settings.image_max_dimension
            img.thumbnail((max_dim, max_dim))

            buffer = BytesIO()
            img.save(buffer, format="JPEG", quality=settings.image_jpeg_quality)
            logger.info(
                "Resized image for extraction",
                original_bytes=len(file_bytes),
                resized_bytes=buffer.tell(),
                size=img.size,
            )
            return buffer.getvalue(), "image/jpeg"
    except Exception as e:
        logger.warning(f"Resize failed, sending original image: {e}")
        return file_bytes, mime_type


def parse_extraction_response(text: str | None) -> ExtractionResult:
    """
    Turn the model's JSON text into rows.

    Accepts either the declared object ({vendorName, items}) or a bare list
    of items. Anything else yields no rows. Invalid JSON raises ValueError.
    """
    if not text or not text.strip():
        return ExtractionResult()

    raw: Any = json.loads(text)

    if isinstance(raw, list):
        items_list, vendor = raw, ""
    elif isinstance(raw, dict):
        items_list = raw.get("items") or []
        vendor = raw.get("vendorName") or ""
        if not isinstance(items_list, list):
            items_list = []
    else:
        items_list, vendor = [], ""

    vendor = vendor.strip() if isinstance(vendor, str) else ""
    rows = [ExtractedRow.from_model_item(item, vendor) for item in items_list]
    return ExtractionResult(vendor=vendor, rows=rows)


def _build_model():
    genai.configure(api_key=settings.gemini_api_key)
    return genai.GenerativeModel(
        settings.gemini_model,
        generation_config=genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=INVOICE_SCHEMA,
        ),
    )


async def extract_inventory(file_bytes: bytes, mime_type: str, model=None) -> ExtractionResult:
    """
    Ask Gemini to read an order sheet and return its raw rows.

    ``model`` is anything with an async ``generate_content_async``; when not
    given, one is built from settings. Without a configured API key a fixed
    mock extraction is returned.
    """
    if model is None and not settings.gemini_api_key:
        logger.warning(
            "Gemini not configured - using MOCK data. "
            "Set GEMINI_API_KEY to use real extraction."
        )
        result = parse_extraction_response(json.dumps(MOCK_RESPONSE))
        logger.info("Returning mock extraction", file_size_bytes=len(file_bytes or b""), rows=len(result.rows))
        return result

    try:
        data, upload_mime = prepare_image(file_bytes, mime_type)
        if model is None:
            model = _build_model()

        logger.info(
            "Sending document to Gemini",
            model=settings.gemini_model,
            mime_type=upload_mime,
            size_bytes=len(data),
        )
        response = await model.generate_content_async(
            [{"mime_type": upload_mime, "data": data}, EXTRACTION_PROMPT]
        )
        result = parse_extraction_response(response.text)

        logger.info("Extraction finished", vendor=result.vendor, rows=len(result.rows))
        return result

    except Exception as e:
        logger.error(f"Gemini extraction failed: {e}")
        raise ExtractionError() from e
