OUTPUT_FORMATS = {
    "jpeg": ("JPEG", "image/jpeg"),
    "jpg": ("JPEG", "image/jpeg"),
    "png": ("PNG", "image/png"),
}

# Horizontal gutter subtracted from the canvas width before a wrapped line is accepted.
WRAP_MARGIN_PX = 20

RENDER_FONT_DIVISOR = 12
RENDER_FONT_MIN = 16
RENDER_FONT_MAX = 48

# Top/bottom anchors sit 1.5 font sizes from the edge; extra fields are 2 font sizes apart.
EDGE_OFFSET_FACTOR = 1.5
ADDITIONAL_STEP_FACTOR = 2.0

# Top and bottom text count toward a template's text field budget.
FIXED_FIELD_COUNT = 2

CAPTION_PROVIDERS = {"none", "static"}
STATIC_CAPTION_FORMAT = "AI generated caption for {name} meme"
