from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Invoice Flow API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Bitcoin payment requests with stateless share links"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Origin used when building share links
    PUBLIC_ORIGIN: str = "http://localhost:3000"

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "invoice_flow"
    INVOICE_STORAGE_KEY: str = "invoice_flow_history_btc"

    # Price / balance providers
    PRICE_TIMEOUT_SECONDS: float = 10.0
    BALANCE_TIMEOUT_SECONDS: float = 15.0
    PRICE_REFRESH_SECONDS: float = 60.0
    BLOCKCHAIN_INFO_TICKER_URL: str = "https://blockchain.info/ticker"
    COINBASE_SPOT_URL: str = "https://api.coinbase.com/v2/prices/BTC-USD/spot"
    BLOCKCHAIR_ADDRESS_URL: str = "https://api.blockchair.com/bitcoin/dashboards/address/{address}"
    EXPLORER_ADDRESS_URL: str = "https://blockchair.com/bitcoin/address/{address}"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
