from pathlib import Path
from string import Formatter
from typing import Dict, Set


class PromptTemplate:
    """Шаблон промпта из .md файла с плейсхолдерами вида {name}"""

    def __init__(self, template_path: str):
        self.template_path = Path(template_path)
        self._template = None

    def load(self) -> str:
        if self._template is None:
            self._template = self.template_path.read_text(encoding='utf-8')
        return self._template

    @property
    def placeholders(self) -> Set[str]:
        return {field for _, field, _, _ in Formatter().parse(self.load()) if field}

    def format(self, **kwargs) -> str:
        missing = self.placeholders - kwargs.keys()
        if missing:
            raise ValueError(f"Prompt '{self.template_path.stem}' is missing values for: {', '.join(sorted(missing))}")
        return self.load().format(**kwargs)


class PromptManager:
    """Промпты лежат в app/prompts/<name>.md и кэшируются после первого чтения"""

    def __init__(self, template_dir: str = None):
        if template_dir is None:
            # app/utils -> app/prompts
            self.template_dir = Path(__file__).parent.parent / "prompts"
        else:
            self.template_dir = Path(template_dir)

        self._templates: Dict[str, PromptTemplate] = {}

    def get_template(self, name: str) -> PromptTemplate:
        if name not in self._templates:
            template_path = self.template_dir / f"{name}.md"
            if not template_path.exists():
                raise FileNotFoundError(f"Prompt template '{name}' not found at {template_path}")
            self._templates[name] = PromptTemplate(template_path)

        return self._templates[name]

    def render(self, template_name: str, **kwargs) -> str:
        return self.get_template(template_name).format(**kwargs)

    def list_templates(self) -> list[str]:
        if not self.template_dir.exists():
            return []
        return sorted(file_path.stem for file_path in self.template_dir.glob("*.md"))


prompt_manager = PromptManager()
