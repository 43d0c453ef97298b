"""
Project-wide constants for the Hive AI detection client
"""  # noqa: D200, D212, D415

# ==============================================================================
# Provider and Network Configuration
# ==============================================================================

HIVE_API_BASE_URL = "https://api.thehive.ai/api/v2"
SYNC_ENDPOINT = f"{HIVE_API_BASE_URL}/task/sync"

NETWORK_TIMEOUT = 30.0  # seconds
MIN_REQUEST_INTERVAL = 1.0  # seconds between dispatches

# ==============================================================================
# Input Validation
# ==============================================================================

_MB = 1024 * 1024

MAX_FILE_SIZE = 10 * _MB

ACCEPTED_IMAGE_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
)

# ==============================================================================
# Persistence
# ==============================================================================

CREDENTIAL_STORE_KEY = "hive_api_key"
DEFAULT_CREDENTIAL_STORE_PATH = "~/.config/hive_detection/credentials.json"

# ==============================================================================
# Response Normalization
# ==============================================================================

MODEL_NAME = "Hive AI"
ERROR_MODEL_NAME = "Error"

DECISION_THRESHOLD = 0.5  # confidence >= threshold means AI-generated
GENERATOR_NOISE_FLOOR = 0.1  # generator scores at or below are dropped

AI_GENERATED_CLASS = "ai_generated"
NOT_AI_GENERATED_CLASS = "not_ai_generated"

# Verdict and meta classes that never name a generator
NON_GENERATOR_CLASSES = frozenset(
    {
        AI_GENERATED_CLASS,
        NOT_AI_GENERATED_CLASS,
        "none",
        "inconclusive",
        "inconclusive_video",
        "deepfake",
    }
)

# Provider aliases that refer to the same generator family
GENERATOR_ALIASES = {
    "dall_e": "dalle",
    "dalle2": "dalle",
    "dalle3": "dalle",
    "stable_diffusion": "stablediffusion",
    "stable_diffusion_xl": "stablediffusionxl",
    "sdxl": "stablediffusionxl",
    "firefly": "adobefirefly",
    "adobe_firefly": "adobefirefly",
    "bing_image_creator": "bingimagecreator",
    "gpt4o": "4o",
    "gpt_4o": "4o",
    "leonardo_ai": "leonardo",
}

GENERATOR_DISPLAY_NAMES = {
    "dalle": "DALL-E",
    "midjourney": "Midjourney",
    "stablediffusion": "Stable Diffusion",
    "stablediffusionxl": "Stable Diffusion XL",
    "flux": "Flux",
    "leonardo": "Leonardo AI",
    "adobefirefly": "Adobe Firefly",
    "bingimagecreator": "Bing Image Creator",
    "grok": "Grok",
    "4o": "GPT-4o",
    "recraft": "Recraft",
    "imagen": "Imagen",
    "imagen4": "Imagen 4",
    "ideogram": "Ideogram",
    "kandinsky": "Kandinsky",
    "wuerstchen": "Würstchen",
    "titan": "Amazon Titan",
    "sora": "Sora",
    "pika": "Pika",
    "runway": "Runway",
    "luma": "Luma",
    "kling": "Kling",
    "other_image_generators": "Other AI Generator",
}

# ==============================================================================
# Service Descriptor
# ==============================================================================

SERVICE_NAME = "Hive AI Detection Service"
SERVICE_VERSION = "1.0.0"
SERVICE_CAPABILITIES = (
    "Real-time AI detection with industry-leading accuracy",
    "Multi-generator identification (DALL-E, Midjourney, Stable Diffusion, etc.)",
    "C2PA metadata analysis for provenance tracking",
    "Confidence scoring and detailed breakdown analysis",
    "Rate limiting and error handling for production use",
    f"Support for images up to {MAX_FILE_SIZE // _MB}MB in size",
)
