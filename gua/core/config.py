from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Gua Backend"
    debug: bool = False

    # Paths
    db_path: Path = Path(__file__).resolve().parent.parent.parent / "gua.db"

    # Completion service (server side only, never sent to clients)
    llm_provider: str = "deepseek"  # deepseek
    deepseek_api_key: str = ""
    deepseek_url: str = "https://api.deepseek.com/chat/completions"
    deepseek_model: str = "deepseek-chat"
    request_timeout: float = 60.0

    # Where the chat client reaches this backend
    backend_url: str = "http://localhost:3001"

    # Identity
    identity_provider: str = "supabase"  # supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Documents
    max_upload_bytes: int = 10 * 1024 * 1024

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "GUA_",
    }


settings = Settings()
