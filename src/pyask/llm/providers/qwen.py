from ..models import ModelDescriptor
from .openai import OpenAICompatibleProvider


class QwenProvider(OpenAICompatibleProvider):
    """Alibaba Qwen through DashScope's compatible mode.

    DashScope has no public model listing, so discovery always returns the
    fallback list.
    """

    name = "qwen"
    display_name = "Qwen"
    base_url = "https://dashscope-intl.aliyuncs.com/compatible-mode"
    models_path = None
    fallback_models = (
        ModelDescriptor(id="qwen-max", display_name="Qwen Max", description="Most capable Qwen model"),
        ModelDescriptor(id="qwen-plus", display_name="Qwen Plus", description="Balanced performance"),
        ModelDescriptor(id="qwen-turbo", display_name="Qwen Turbo", description="Fast and efficient"),
        ModelDescriptor(id="qwen2.5-72b-instruct", display_name="Qwen 2.5 72B", description="Large instruction model"),
        ModelDescriptor(id="qwen2.5-32b-instruct", display_name="Qwen 2.5 32B", description="Medium instruction model"),
    )
