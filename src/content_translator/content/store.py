"""Reading and writing content trees as JSON files."""

import json
from pathlib import Path
from typing import Optional

from ..errors import ContentFileError
from .models import ContentNode


class ContentStore:
    """Loads and saves content trees.

    Key order is preserved on both read and write so field paths come out
    in the order authors wrote them.
    """

    def load(self, path: Path) -> ContentNode:
        """Load a content tree from a JSON file.

        Args:
            path: Path to the JSON file.

        Returns:
            The parsed content tree.

        Raises:
            ContentFileError: If the file cannot be read or is not valid JSON.
        """
        try:
            # utf-8-sig drops a leading BOM if an editor added one
            content = Path(path).read_text(encoding='utf-8-sig')
        except (OSError, UnicodeDecodeError) as e:
            raise ContentFileError(f"Cannot read {path}: {e}") from e

        return self.loads(content, source=str(path))

    def loads(self, content: str, source: str = "<string>") -> ContentNode:
        """Parse a content tree from a JSON string."""
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ContentFileError(f"Invalid JSON in {source}: {e}") from e

    def dumps(self, tree: ContentNode) -> str:
        """Format a content tree as JSON text."""
        return json.dumps(tree, ensure_ascii=False, indent=2) + "\n"

    def write(self, tree: ContentNode, path: Path) -> None:
        """Write a content tree to a JSON file.

        Args:
            tree: Content tree to write.
            path: Path to the output file.
        """
        path = Path(path)
        # Ensure parent directory exists
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dumps(tree), encoding='utf-8')

    def write_bundle(self, trees: dict[str, ContentNode], path: Path) -> None:
        """Write several localized trees as one ``{lang: tree}`` file."""
        self.write(dict(trees), path)

    @staticmethod
    def target_path(source_path: Path, language: str, out_dir: Optional[Path] = None) -> Path:
        """Get the output path for a language (``<dir>/<lang>.json``).

        Args:
            source_path: Path of the source content file.
            language: Target language code.
            out_dir: Output directory. Defaults to the source file's directory.
        """
        directory = Path(out_dir) if out_dir else Path(source_path).parent
        return directory / f"{language}.json"
