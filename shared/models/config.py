from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Describes one environment setting a client needs before it can be used.

    Attributes:
        env_key (str): The raw key name, prefixed by the client with "<TYPE>_<ENGINE>_" (e.g. "API_KEY" -> "LLM_GEMINI_API_KEY").
        val_type (str): Expected value type. One of "string", "number", "bool" and "list".
        default (str | int | float | bool | list | None): Value used when the variable is unset. None marks the setting as required.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None
