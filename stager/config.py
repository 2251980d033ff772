import os

# Primary provider (fal.ai)
FAL_RUN_BASE = os.environ.get("FAL_RUN_BASE", "https://fal.run")
FAL_UPLOAD_BASE = os.environ.get(
    "FAL_UPLOAD_BASE", "https://api.fal.ai/v1/serverless/files/file/local/uploads"
)
FAL_EDIT_MODEL = os.environ.get("FAL_EDIT_MODEL", "fal-ai/nano-banana/edit")
FAL_TEXT_MODEL = os.environ.get("FAL_TEXT_MODEL", "fal-ai/flux-pro/v1.1-ultra")
FAL_DEPTH_MODEL = os.environ.get("FAL_DEPTH_MODEL", "fal-ai/flux-general")
FAL_DEPTH_CONTROLNET = os.environ.get(
    "FAL_DEPTH_CONTROLNET", "Shakker-Labs/FLUX.1-dev-ControlNet-Depth"
)
# Hosts whose URLs fal can already dereference
FAL_ASSET_DOMAINS = ("fal.media", "fal.ai", "fal.run")
FAL_TIMEOUT = float(os.environ.get("FAL_TIMEOUT", "120"))

# Whole primary call (uploads + generation) must finish within this deadline
PRIMARY_DEADLINE_SECONDS = float(os.environ.get("PRIMARY_DEADLINE_SECONDS", "180"))

# Depth-conditioned synthesis tuning
DEPTH_CONDITIONING_SCALE = float(os.environ.get("DEPTH_CONDITIONING_SCALE", "0.7"))
DEPTH_APPLY_STRENGTH = float(os.environ.get("DEPTH_APPLY_STRENGTH", "0.8"))

# Fallback provider (pollinations.ai)
FALLBACK_BASE = os.environ.get("FALLBACK_BASE", "https://image.pollinations.ai")
OUTPUT_WIDTH = int(os.environ.get("OUTPUT_WIDTH", "1024"))
OUTPUT_HEIGHT = int(os.environ.get("OUTPUT_HEIGHT", "768"))

# Off-screen capture
CAPTURE_WIDTH = int(os.environ.get("CAPTURE_WIDTH", "1024"))
CAPTURE_HEIGHT = int(os.environ.get("CAPTURE_HEIGHT", "768"))
CAPTURE_CHANNEL = os.environ.get("CAPTURE_CHANNEL", "depth")  # 'depth' or 'color'
# pyrender picks its GL backend from this at import time
os.environ.setdefault("PYOPENGL_PLATFORM", "egl")

# Image proxy
PROXY_MAX_REDIRECTS = int(os.environ.get("PROXY_MAX_REDIRECTS", "3"))

# Product list
TAX_RATE = float(os.environ.get("TAX_RATE", "0.10"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
