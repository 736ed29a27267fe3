from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.models.Generation import Content, GenerateContentResponse
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class LLMClientGemini(LLMClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://generativelanguage.googleapis.com", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._api_version = self.get_config_val("API_VERSION", default="v1beta", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Gemini"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://generativelanguage.googleapis.com"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="API_VERSION", val_type="string", default="v1beta"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"x-goog-api-key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/{self._api_version}/models/{self.chat_model}"

    def _get_endpoint_generate(self, model: str) -> str:
        model_name = model if model.startswith("models/") else f"models/{model}"
        return f"/{self._api_version}/{model_name}:generateContent"

    ################ PAYLOAD BUILDER ##################
    def get_generate_payload(self, contents: list[Content], store_names: list[str]) -> dict:
        """Build the Gemini generateContent request body with the file search tool.

        Returns:
            dict: {"contents": [...], "tools": [{"fileSearch": {"fileSearchStoreNames": [...]}}]}
        """
        return {
            "contents": [content.model_dump(exclude_none=True) for content in contents],
            "tools": [{"fileSearch": {"fileSearchStoreNames": store_names}}],
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_generate_response(self, response_data: dict) -> GenerateContentResponse:
        """Validate a Gemini generateContent response.

        The REST payload has no direct text field, so text is derived from the
        text parts of the first candidate, mirroring the official SDK.
        """
        response = self._parse_model(GenerateContentResponse, response_data)
        if response.text is None:
            candidate = response.first_candidate()
            if candidate and candidate.content:
                texts = [part.text for part in candidate.content.parts if part.text]
                response.text = "".join(texts) if texts else None
        return response
