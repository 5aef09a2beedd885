from .base import ConfigSection


class TemplateSettings(ConfigSection):
    # prompts ship inside the package so installed copies find them
    package: str = "assessor"
    llm_path: str = "templates"
