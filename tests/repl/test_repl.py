"""Tests for the REPL Interface."""
import pytest
from unittest.mock import patch, MagicMock
from io import StringIO

from dictlisp.config.settings import InterpreterSettings
from dictlisp.main import Interpreter
from dictlisp.repl.repl import Repl
from dictlisp.system.models import EvaluationFailure, EvaluationResult

@pytest.fixture
def output():
    """Captures everything the REPL prints."""
    return StringIO()

@pytest.fixture
def mock_interpreter():
    """Fixture for a mock interpreter."""
    interpreter = MagicMock()
    interpreter.settings = InterpreterSettings()
    interpreter.run.return_value = EvaluationResult(status="OK", value=3, output="3")
    return interpreter

@pytest.fixture
def repl_instance(mock_interpreter, output):
    """Fixture for REPL instance with mock interpreter."""
    return Repl(mock_interpreter, output_stream=output)

class TestRepl:
    """Tests for the REPL class."""

    def test_init(self, mock_interpreter):
        """Test REPL initialization."""
        repl = Repl(mock_interpreter)

        assert repl.interpreter == mock_interpreter
        assert repl.verbose is False
        assert repl.running is False
        for cmd in ["/help", "/exit", "/desugar", "/verbose"]:
            assert cmd in repl.commands

    def test_process_input_command(self, repl_instance):
        """Test processing a command input."""
        with patch.object(repl_instance, '_handle_command') as mock_handle_command:
            repl_instance._process_input("/help")
            mock_handle_command.assert_called_once_with("/help")

    def test_process_input_program(self, repl_instance):
        """Test processing a program input."""
        with patch.object(repl_instance, '_handle_program') as mock_handle_program:
            repl_instance._process_input("  (+ 1 2)  ")
            mock_handle_program.assert_called_once_with("(+ 1 2)")

    def test_process_input_empty(self, repl_instance, mock_interpreter):
        """Blank lines are ignored."""
        repl_instance._process_input("   ")
        mock_interpreter.run.assert_not_called()

    def test_handle_program_success(self, repl_instance, mock_interpreter, output):
        """Test printing a successful result."""
        repl_instance._handle_program("(+ 1 2)")
        mock_interpreter.run.assert_called_once_with("(+ 1 2)")
        assert output.getvalue() == "3\n"

    def test_handle_program_failure(self, repl_instance, mock_interpreter, output):
        """Test printing a failure."""
        failure = EvaluationFailure(reason='unbound_variable', message="Unbound variable: 'x' is not defined.", expression="x")
        mock_interpreter.run.return_value = EvaluationResult(status="FAILED", error=failure)

        repl_instance._handle_program("x")

        assert "Error (unbound_variable): Unbound variable: 'x' is not defined." in output.getvalue()
        assert "expression:" not in output.getvalue()

    def test_handle_program_failure_verbose(self, repl_instance, mock_interpreter, output):
        """Verbose mode adds the failing expression."""
        failure = EvaluationFailure(reason='type_error', message="bad", expression="(+ 1 'a)")
        mock_interpreter.run.return_value = EvaluationResult(status="FAILED", error=failure)
        repl_instance.verbose = True

        repl_instance._handle_program("(+ 1 'a)")

        assert "expression: (+ 1 'a)" in output.getvalue()

    def test_unknown_command(self, repl_instance, output):
        """Test handling an unknown command."""
        repl_instance._handle_command("/nope")
        assert "Unknown command: /nope" in output.getvalue()

    def test_cmd_help(self, repl_instance, output):
        """Test help command."""
        repl_instance._cmd_help("")
        text = output.getvalue()
        assert "Available commands:" in text
        assert "/desugar" in text

    def test_cmd_verbose(self, repl_instance, output):
        """Test verbose command toggle and explicit values."""
        repl_instance._cmd_verbose("")
        assert repl_instance.verbose is True
        repl_instance._cmd_verbose("off")
        assert repl_instance.verbose is False
        repl_instance._cmd_verbose("on")
        assert repl_instance.verbose is True
        assert "Verbose mode: on" in output.getvalue()

    def test_cmd_verbose_invalid(self, repl_instance, output):
        repl_instance._cmd_verbose("maybe")
        assert repl_instance.verbose is False
        assert "Invalid value: maybe" in output.getvalue()

    def test_cmd_desugar(self, repl_instance, mock_interpreter, output):
        """Test switching desugaring on and off."""
        repl_instance._handle_command("/desugar on")
        assert mock_interpreter.settings.desugar_dictionaries is True
        repl_instance._handle_command("/desugar off")
        assert mock_interpreter.settings.desugar_dictionaries is False
        repl_instance._handle_command("/desugar")
        assert output.getvalue().splitlines()[-1] == "Desugaring: off"

    def test_cmd_exit(self, repl_instance, output):
        """Test exit command."""
        repl_instance.running = True
        repl_instance._cmd_exit("")
        assert repl_instance.running is False
        assert "Exiting..." in output.getvalue()

    def test_start_loop(self, repl_instance, mock_interpreter, output):
        """The loop reads lines until /exit."""
        with patch('builtins.input', side_effect=["(+ 1 2)", "/exit", "never read"]):
            repl_instance.start()
        mock_interpreter.run.assert_called_once_with("(+ 1 2)")
        assert repl_instance.running is False

    def test_start_eof(self, repl_instance, output):
        """EOF ends the session."""
        with patch('builtins.input', side_effect=EOFError):
            repl_instance.start()
        assert "Exiting..." in output.getvalue()

class TestReplWithInterpreter:
    """REPL sessions against a real interpreter."""

    def test_session(self, output):
        repl = Repl(Interpreter(), output_stream=output)
        with patch('builtins.input', side_effect=["(define x 2) (* x 21)", "(car '())", "/exit"]):
            repl.start()
        lines = output.getvalue().splitlines()
        assert "42" in lines
        assert any(line.startswith("Error (not_compound)") for line in lines)

    def test_desugar_toggle_changes_results(self, output):
        repl = Repl(Interpreter(), output_stream=output)
        repl._process_input("(dict (a 1))")
        repl._process_input("/desugar on")
        repl._process_input("(dict (a 1))")
        lines = output.getvalue().splitlines()
        assert lines[0] == "{a: 1}"
        assert lines[-1] == "((a . 1))"
