from shared.helper.HelperConfig import HelperConfig
from shared.clients.filesearch.FileSearchClientInterface import FileSearchClientInterface


class FileSearchClientManager:
    """Manager class to instantiate the configured file search client."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """Read the file search engine name from env configuration (FILESEARCH_ENGINE, default "gemini").

        Returns:
            str: Capitalised engine name (e.g. "Gemini").
        """
        engine = self.helper_config.get_string_val("FILESEARCH_ENGINE", default="gemini")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> FileSearchClientInterface:
        """Instantiate the file search client for the configured engine.

        Raises:
            ValueError: If the engine is unsupported or cannot be imported.
        """
        engine = self._get_engine_from_env()
        class_name = f"FileSearchClient{engine}"
        try:
            module = __import__(
                f"shared.clients.filesearch.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError("Unsupported file search engine '%s'. Error: %s" % (engine, e))
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated file search client for engine: %s", engine)
        return client

    def get_client(self) -> FileSearchClientInterface:
        """Return the instantiated file search client."""
        return self.client
