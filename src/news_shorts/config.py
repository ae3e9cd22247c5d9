import os
from dotenv import load_dotenv

load_dotenv()


def _flag(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() == "true"


# Output directories
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "output")
TEMP_DIR = os.getenv("TEMP_DIR", "temp")  # one sub-directory per production run

# Summarizer Configuration
# SUMMARY_PROVIDER: "deepseek" (OpenAI-compatible chat API) or "ollama" (local)
SUMMARY_PROVIDER = os.getenv("SUMMARY_PROVIDER", "deepseek").lower()
DEEPSEEK_API_KEY = os.getenv("DEEPSEEK_API_KEY", "")
DEEPSEEK_BASE_URL = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")
DEEPSEEK_MODEL = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1:8b")

# TTS Configuration
# TTS_PROVIDER: "dashscope" (Qwen TTS, WAV output) or "edge" (Edge-TTS, free)
TTS_PROVIDER = os.getenv("TTS_PROVIDER", "dashscope").lower()
DASHSCOPE_TTS_URL = os.getenv(
    "DASHSCOPE_TTS_URL",
    "https://dashscope.aliyuncs.com/api/v1/services/aigc/multimodal-generation/generation",
)
DASHSCOPE_API_KEY = os.getenv("DASHSCOPE_API_KEY", "")
DASHSCOPE_TTS_MODEL = os.getenv("DASHSCOPE_TTS_MODEL", "qwen-tts")
DASHSCOPE_TTS_VOICE = os.getenv("DASHSCOPE_TTS_VOICE", "Serena")
TTS_EDGE_VOICE = os.getenv("TTS_EDGE_VOICE", "zh-CN-XiaoxiaoNeural")
# - "zh-CN-XiaoxiaoNeural" (Mandarin, Female) - lively, suits short videos
# - "zh-CN-YunxiNeural" (Mandarin, Male)

# Voice effect ("cartoon" voice): samples are replayed at VOICE_PITCH_RATE
# and resampled to VOICE_OUTPUT_RATE, raising the pitch.
VOICE_EFFECT_ENABLED = _flag("VOICE_EFFECT_ENABLED", "true")
VOICE_PITCH_RATE = int(os.getenv("VOICE_PITCH_RATE", "30000"))
VOICE_OUTPUT_RATE = int(os.getenv("VOICE_OUTPUT_RATE", "22050"))

SUBTITLES_ENABLED = _flag("SUBTITLES_ENABLED", "true")

# Video Configuration
VIDEO_WIDTH = int(os.getenv("VIDEO_WIDTH", "720"))
VIDEO_HEIGHT = int(os.getenv("VIDEO_HEIGHT", "1280"))  # Vertical format (9:16)
FPS = int(os.getenv("FPS", "30"))
SECONDS_PER_IMAGE = float(os.getenv("SECONDS_PER_IMAGE", "2.0"))

# External tools
FFMPEG_BINARY = os.getenv("FFMPEG_BINARY", "ffmpeg")
FFMPEG_TIMEOUT = float(os.getenv("FFMPEG_TIMEOUT", "600"))  # seconds

# Network hardening
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))  # seconds
RETRY_ATTEMPTS = int(os.getenv("RETRY_ATTEMPTS", "3"))
RETRY_BACKOFF = float(os.getenv("RETRY_BACKOFF", "1.0"))  # seconds, doubled per attempt

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console").lower()  # "console" or "json"
