from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.llm.models.Generation import Content, GenerateContentResponse
from shared.helper.HelperConfig import HelperConfig

DEFAULT_CHAT_MODEL = "gemini-2.5-flash"


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # chat / generation config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL", default=DEFAULT_CHAT_MODEL)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_generate(self, model: str) -> str:
        """Returns the endpoint path for grounded generation requests (e.g. "/v1beta/models/<model>:generateContent")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_generate_payload(self, contents: list[Content], store_names: list[str]) -> dict:
        """Build the backend-specific request body for a grounded generation request.

        Args:
            contents (list[Content]): The conversation history, oldest turn first.
            store_names (list[str]): Full resource names of the stores grounding is restricted to.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_generate_response(self, response_data: dict) -> GenerateContentResponse:
        """Validate a raw generation response into the typed response schema.

        Raises:
            MalformedResponseError: If the payload does not match the schema.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_generate(self, contents: list[Content], store_names: list[str], model: str | None = None) -> GenerateContentResponse:
        """Send a generation request grounded against the given file search stores.

        Args:
            contents (list[Content]): The conversation history including the new user turn.
            store_names (list[str]): Stores the answer is grounded against.
            model (str | None): Model id, defaults to the configured chat model.

        Returns:
            GenerateContentResponse: The validated response.

        Raises:
            RemoteCallError: If the backend answers with a non-2xx status.
            MalformedResponseError: If the response does not match the schema.
        """
        body = self.get_generate_payload(contents, store_names)
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_generate(model or self.chat_model),
            json=body,
            raise_on_error=True,
        )
        return self.extract_generate_response(self._decode_json(response))
