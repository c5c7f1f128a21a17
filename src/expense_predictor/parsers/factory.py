import importlib
from pathlib import Path
from typing import Any, Dict, Optional, Type

from expense_predictor.config.settings import ConfigLoader
from expense_predictor.parsers.base import StatementParser


class ParserFactory:
    """
    Factory for creating ledger file parsers.

    Registry mapping format names (e.g. 'tsv', 'csv') to parser classes,
    plus the file extensions each format is picked for.
    """

    _registry: Dict[str, Type[StatementParser]] = {}
    _extensions: Dict[str, str] = {}

    @classmethod
    def register(
        cls,
        format_name: str,
        parser_class: Type[StatementParser],
        extensions: Optional[list] = None,
    ) -> None:
        """
        Register a parser for a ledger format.

        Args:
            format_name: Unique format identifier (e.g. 'tsv')
            parser_class: The parser class
            extensions: File extensions to pick this parser for. Defaults
                to the parser's own EXTENSIONS.

        Raises:
            ValueError: If the format is already registered
            TypeError: If parser_class doesn't inherit from StatementParser
        """
        if format_name in cls._registry:
            raise ValueError(f"Parser for '{format_name}' is already registered")

        if not isinstance(parser_class, type) or not issubclass(parser_class, StatementParser):
            raise TypeError(f"{parser_class} must inherit from StatementParser")

        cls._registry[format_name] = parser_class
        for ext in extensions if extensions is not None else parser_class.EXTENSIONS:
            cls._extensions[ext.lower()] = format_name

    @classmethod
    def reset(cls) -> None:
        """Forget every registered parser"""
        cls._registry = {}
        cls._extensions = {}

    @classmethod
    def create_parser(cls, format_name: str, **kwargs: Any) -> StatementParser:
        """
        Create a parser instance for a format.

        Raises:
            ValueError: If no parser is registered for this format

        Example:
            parser = ParserFactory.create_parser('tsv')
            result = parser.parse('transactions.txt')
        """
        if not cls._registry:
            cls.load_parsers_from_config()

        if format_name not in cls._registry:
            available = ', '.join(cls._registry.keys())
            raise ValueError(
                f"No parser registered for '{format_name}'. "
                f"Available parsers: {available}"
            )

        return cls._registry[format_name](**kwargs)

    @classmethod
    def for_file(cls, filepath: str, **kwargs: Any) -> StatementParser:
        """
        Create the parser registered for a file's extension.

        Raises:
            ValueError: If no parser handles this extension
        """
        if not cls._registry:
            cls.load_parsers_from_config()

        suffix = Path(filepath).suffix.lower()
        if suffix not in cls._extensions:
            raise ValueError(f"No parser registered for '{suffix}' files")

        return cls.create_parser(cls._extensions[suffix], **kwargs)

    @classmethod
    def get_available_formats(cls) -> list[str]:
        """Return list of all registered format names"""
        return list(cls._registry.keys())

    @classmethod
    def load_parsers_from_config(cls, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Load and register parsers from configuration.

        Args:
            config: Optional config dict. If None, loads from ConfigLoader.

            Example (testing):
                test_config = {"parsers": [...]}
                ParserFactory.load_parsers_from_config(config=test_config)
        """
        if config is None:
            config = ConfigLoader.load_parsers_config()

        for parser_config in config['parsers']:
            module_path, class_name = str(parser_config['class']).rsplit('.', 1)
            module = importlib.import_module(module_path)
            parser_class = getattr(module, class_name)

            if parser_config['format'] in cls._registry:
                continue
            cls.register(parser_config['format'], parser_class, parser_config.get('extensions'))
