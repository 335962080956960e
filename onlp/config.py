from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ONLP_")

    delimiter: str = Field(default=";", min_length=1, max_length=1)
    encoding: str = "utf-8"
    # strict: I- без открытого чанка -> фатальная ошибка; lenient: чиним в B-
    strict: bool = True
    # слово вне <START:...> ... <END> -> фатальная ошибка (по умолчанию берётся текущий тег)
    reject_bare_words: bool = False
    chunksize: int = Field(default=10_000, gt=0)

    log_level: str = "INFO"
    log_format: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


settings = Settings()
