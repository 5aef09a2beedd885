import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Provider, ThreadSafeSingleton

import assessor.lib.json


def provide_llm_env(package: str, llm_path: str) -> jinja2.Environment:
    """Provide Jinja2 environment for LLM prompt templates.

    Prompts use no autoescape and trim block whitespace so rendered prompts
    stay compact.
    """
    env = jinja2.Environment(
        loader=jinja2.PackageLoader(package, llm_path),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.policies.update({
        "json.dumps_function": assessor.lib.json.dumps,
        "json.dumps_kwargs": {"sort_keys": True, "indent": 2},
    })
    return env


class TemplateContainer(DeclarativeContainer):
    config: Configuration = Configuration(strict=True)
    llm: Provider[jinja2.Environment] = ThreadSafeSingleton(provide_llm_env, config.package, config.llm_path)
