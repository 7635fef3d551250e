from post_store.settings import Settings

settings = Settings()
