from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("ordersheet-scanner", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Gemini (optional, mock extraction when unset)
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL")

    # Image preparation before upload to the model
    image_max_dimension: int = Field(1500, alias="IMAGE_MAX_DIMENSION")
    image_jpeg_quality: int = Field(80, alias="IMAGE_JPEG_QUALITY")

    # Durable state (history + user settings), one JSON file per key
    state_dir: str = Field(".ordersheet", alias="STATE_DIR")

    # Spreadsheet the webhook writes into; always shown to the client
    default_sheet_url: str = Field(
        "https://docs.google.com/spreadsheets/d/1c9qt5RejeAZ_tn-gXhFaDwVSIgZdmgRPojKD1LqhRYc/edit?gid=0#gid=0",
        alias="DEFAULT_SHEET_URL",
    )

    # Clipboard fallback: unset = hand TSV back to the client, else pipe into this command
    clipboard_command: str | None = Field(default=None, alias="CLIPBOARD_COMMAND")

    # CORS allowed origins (comma-separated list)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

settings = Settings()
