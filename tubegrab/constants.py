from __future__ import annotations


APP_NAME: str = "tubegrab"

# User-facing, short, user-safe messages (no stack traces)
MSG_NO_URL: str = "No URL provided"
MSG_NO_FORMAT_ID: str = "No video format ID provided"
MSG_INVALID_JSON: str = "Request body must be a JSON object"
MSG_NO_COOKIES_FILE: str = "No file uploaded. Please upload a valid cookies file."
MSG_COOKIES_UPLOADED: str = "Cookies file uploaded and validated successfully."
MSG_INTERNAL_ERROR: str = "Something went wrong. Please try again later."
