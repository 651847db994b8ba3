import os

MAX_UPLOAD_BYTES = 10 * 1024 * 1024   # 10 MB of recorded audio
MAX_REQUEST_BYTES = 11 * 1024 * 1024  # audio plus multipart framing
CHUNK_SIZE = 1024 * 1024
MAX_ERROR_CHARS = 1200

# Scores used when the model reply cannot be parsed.
DEFAULT_SCORE = int(os.getenv("PITCHY_DEFAULT_SCORE", "25"))
DEFAULT_CRITERION_SCORE = int(os.getenv("PITCHY_DEFAULT_CRITERION_SCORE", "25"))
