"""REPL interface for interactive sessions."""
import sys
import logging

logger = logging.getLogger(__name__)

_ON = ["on", "true", "yes", "1"]
_OFF = ["off", "false", "no", "0"]

class Repl:
    """Interactive REPL (Read-Eval-Print Loop) interface.
    
    Each input line is evaluated as a complete program in a fresh top-level
    environment; lines starting with '/' are commands.
    """
    
    def __init__(self, interpreter, output_stream=None):
        """Initialize the REPL interface.
        
        Args:
            interpreter: The Interpreter instance
            output_stream: Optional output stream (defaults to sys.stdout)
        """
        self.interpreter = interpreter
        self.verbose = False
        self.running = False
        self.output = output_stream or sys.stdout
        self.commands = {
            "/help": self._cmd_help,
            "/exit": self._cmd_exit,
            "/desugar": self._cmd_desugar,
            "/verbose": self._cmd_verbose,
        }

    def start(self) -> None:
        """Start the REPL interface."""
        print("dictlisp REPL", file=self.output)
        print("Type a program or a command (/help for help)", file=self.output)
        self.running = True
        while self.running:
            try:
                user_input = input("> ")
            except (KeyboardInterrupt, EOFError):
                print("\nExiting...", file=self.output)
                break
            self._process_input(user_input)
    
    def _process_input(self, user_input: str) -> None:
        """Dispatch one line of input to a command or to the interpreter."""
        user_input = user_input.strip()
        
        if not user_input:
            return
        
        if user_input.startswith("/"):
            self._handle_command(user_input)
        else:
            self._handle_program(user_input)
    
    def _handle_command(self, command: str) -> None:
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""
        
        if cmd in self.commands:
            self.commands[cmd](args)
        else:
            print(f"Unknown command: {cmd}", file=self.output)
            print("Type /help for available commands", file=self.output)
    
    def _handle_program(self, source: str) -> None:
        logger.debug(f"REPL evaluating: {source}")
        result = self.interpreter.run(source)
        if result.ok:
            print(result.output, file=self.output)
            if self.verbose:
                print(f"  type: {type(result.value).__name__}", file=self.output)
            return
        print(f"Error ({result.error.reason}): {result.error.message}", file=self.output)
        if self.verbose:
            if result.error.expression:
                print(f"  expression: {result.error.expression}", file=self.output)
            if result.error.details:
                print(f"  details: {result.error.details}", file=self.output)
    
    def _cmd_help(self, args: str) -> None:
        print("Available commands:", file=self.output)
        print("  /help - Show this help", file=self.output)
        print("  /desugar [on|off] - Set or show dictionary desugaring", file=self.output)
        print("  /verbose [on|off] - Toggle verbose mode", file=self.output)
        print("  /exit - Exit the REPL", file=self.output)
    
    def _cmd_desugar(self, args: str) -> None:
        settings = self.interpreter.settings
        arg = args.strip().lower()
        if arg in _ON:
            settings.desugar_dictionaries = True
        elif arg in _OFF:
            settings.desugar_dictionaries = False
        elif arg:
            print(f"Invalid value: {args}", file=self.output)
            return
        print(f"Desugaring: {'on' if settings.desugar_dictionaries else 'off'}", file=self.output)
    
    def _cmd_verbose(self, args: str) -> None:
        arg = args.strip().lower()
        if not arg:
            self.verbose = not self.verbose
        elif arg in _ON:
            self.verbose = True
        elif arg in _OFF:
            self.verbose = False
        else:
            print(f"Invalid value: {args}", file=self.output)
            return
        print(f"Verbose mode: {'on' if self.verbose else 'off'}", file=self.output)
    
    def _cmd_exit(self, args: str) -> None:
        print("Exiting...", file=self.output)
        self.running = False
