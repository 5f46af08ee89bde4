"""
Predicate Registry - named predicate management.

The registry stores and resolves named predicates, enabling:
- Predicate definitions from YAML files
- Programmatic predicate registration
- Reference resolution between definitions
- Built-in predicates for common character classes
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from fsv.parser import PredicateParser, parse_predicates_file

logger = logging.getLogger(__name__)


class PredicateNotFoundError(Exception):
    """Raised when a predicate is not found in the registry."""
    pass


class PredicateRegistry:
    """
    Registry for named predicates.

    Example:
        registry = PredicateRegistry()
        registry.load_file("predicates.yaml")

        view = View("0xDEADBEEF", registry.get("hex"))
    """

    def __init__(self):
        self._predicates: Dict[str, Callable[[str], bool]] = {}
        self._definitions: Dict[str, Any] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}
        self._resolving: List[str] = []
        self._parser = PredicateParser(self)

        self._register_builtins()

    def _register_builtins(self):
        """Register built-in predicates."""
        from fsv.predicates import (
            TruePredicate,
            FalsePredicate,
            ClassPredicate,
        )

        self.register("all", TruePredicate(), metadata={
            "description": "Every character",
            "builtin": True
        })
        self.register("none", FalsePredicate(), metadata={
            "description": "No character",
            "builtin": True
        })

        classes = {
            "vowels": ("vowel", "ASCII vowels, either case"),
            "consonants": ("consonant", "ASCII letters that are not vowels"),
            "letters": ("alpha", "ASCII letters"),
            "digits": ("digit", "Decimal digits"),
            "alnum": ("alnum", "ASCII letters and digits"),
            "whitespace": ("space", "Whitespace characters"),
            "upper": ("upper", "Uppercase ASCII letters"),
            "lower": ("lower", "Lowercase ASCII letters"),
            "punct": ("punct", "ASCII punctuation"),
            "hex": ("hex", "Hexadecimal digits"),
            "printable": ("printable", "Printable ASCII characters"),
        }
        for name, (kind, description) in classes.items():
            self.register(name, ClassPredicate(kind), metadata={
                "description": description,
                "builtin": True
            })

        self.register("non_space", ~ClassPredicate("space"), metadata={
            "description": "Everything except whitespace",
            "builtin": True
        })

    def register(
        self,
        name: str,
        predicate: Callable[[str], bool],
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Register a predicate by name.

        Args:
            name: Predicate name (unique identifier)
            predicate: Any callable of one character
            metadata: Optional metadata (description, builtin flag, etc.)
        """
        if not callable(predicate):
            raise TypeError(f"Predicate '{name}' must be callable")
        self._predicates[name] = predicate
        self._definitions.pop(name, None)
        self._metadata[name] = metadata or {}

    def register_definition(
        self,
        name: str,
        definition: Any,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Register a predicate definition (parsed on first access).

        Args:
            name: Predicate name
            definition: Raw definition (mapping, bool or reference name)
            metadata: Optional metadata
        """
        self._definitions[name] = definition
        self._predicates.pop(name, None)
        self._metadata[name] = metadata or {}

        if isinstance(definition, dict) and "description" in definition:
            self._metadata[name]["description"] = definition["description"]

    def get(self, name: str) -> Callable[[str], bool]:
        """
        Get a predicate by name.

        Raises:
            PredicateNotFoundError: If predicate is not found
        """
        if name in self._predicates:
            return self._predicates[name]

        if name in self._definitions:
            if name in self._resolving:
                chain = " -> ".join(self._resolving + [name])
                raise PredicateNotFoundError(f"Circular predicate reference: {chain}")
            self._resolving.append(name)
            try:
                predicate = self._parser.parse(self._definitions[name])
            finally:
                self._resolving.pop()
            self._predicates[name] = predicate
            return predicate

        raise PredicateNotFoundError(f"Predicate not found: {name}")

    def has(self, name: str) -> bool:
        """Check if a predicate exists in the registry."""
        return name in self._predicates or name in self._definitions

    def list(self, include_builtin: bool = True) -> List[str]:
        """
        List all registered predicate names.

        Args:
            include_builtin: Include built-in predicates

        Returns:
            Sorted list of predicate names
        """
        names = set(self._predicates.keys()) | set(self._definitions.keys())

        if not include_builtin:
            names = {n for n in names if not self._metadata.get(n, {}).get("builtin")}

        return sorted(names)

    def get_metadata(self, name: str) -> Dict[str, Any]:
        """Get metadata for a predicate."""
        return self._metadata.get(name, {})

    def load_file(self, path: Union[str, Path]) -> int:
        """
        Load predicate definitions from a YAML file.

        Returns:
            Number of predicates loaded
        """
        data = parse_predicates_file(path)
        count = 0

        for name, definition in data.items():
            if isinstance(definition, (dict, bool, str)):
                self.register_definition(str(name), definition)
                count += 1
            else:
                logger.warning(f"Skipping predicate '{name}' in {path}: unsupported definition")

        logger.info(f"Loaded {count} predicates from {path}")
        return count

    def load_directory(self, path: Union[str, Path], pattern: str = "*.yaml") -> int:
        """
        Load predicates from all YAML files in a directory.

        Returns:
            Total number of predicates loaded
        """
        path = Path(path)
        count = 0

        for yaml_path in sorted(path.glob(pattern)):
            count += self.load_file(yaml_path)

        # Also check .yml extension
        for yaml_path in sorted(path.glob(pattern.replace(".yaml", ".yml"))):
            count += self.load_file(yaml_path)

        return count

    def describe(self, name: str) -> str:
        """Textual form of a named predicate."""
        predicate = self.get(name)
        describe = getattr(predicate, "describe", None)
        if describe is not None:
            return describe()
        return getattr(predicate, "__name__", "callable")

    def info(self) -> Dict[str, Any]:
        """
        Get registry information.

        Returns:
            Dictionary with registry stats and predicate list
        """
        predicates_info = []
        for name in self.list():
            meta = self._metadata.get(name, {})
            predicates_info.append({
                "name": name,
                "description": meta.get("description", ""),
                "builtin": meta.get("builtin", False),
            })

        return {
            "total_predicates": len(predicates_info),
            "builtin_predicates": sum(1 for p in predicates_info if p["builtin"]),
            "custom_predicates": sum(1 for p in predicates_info if not p["builtin"]),
            "predicates": predicates_info
        }

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PredicateRegistry":
        """Create a registry and load predicates from a YAML file."""
        registry = cls()
        registry.load_file(path)
        return registry

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __iter__(self):
        return iter(self.list())

    def __len__(self) -> int:
        return len(self.list())
