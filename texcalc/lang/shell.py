"""Handles interactive mode for the texcalc interpreter. Uses cmd as backend."""

import cmd

from texcalc.pure.printer import PrintVisitor


class Shell(cmd.Cmd):
    """texcalc interpreter shell. Bindings persist from one line to the next."""
    intro = "texcalc :: TeX formula interpreter\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, runtime, error_handler, printer=None, foil=None, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.runtime = runtime
        self.error_handler = error_handler
        self.error_handler.fatal = False

        self.printer = printer if printer is not None else PrintVisitor()
        self.foil = foil  # FoilVisitor, or None to skip expansion

        self._tmp_line = ""

    def default(self, line):
        """Evaluates an arbitrary texcalc statement. A line ending in a single backslash, or with unclosed braces, is
        continued on the next line.
        """
        with self.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line = self._tmp_line + line
            if Shell.continues(line):
                self._tmp_line = line.rstrip("\\") + "\n"
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.error_handler.register_source(line)
            for outcome in self.runtime.statements(line):
                if not outcome.success:
                    self.error_handler.throw(outcome.error)
                    continue

                print(self.printer.visit(outcome.evaluated))
                if self.foil is not None:
                    print(self.printer.visit(self.foil.visit(outcome.evaluated)))

    @staticmethod
    def continues(line):
        stripped = line.rstrip()
        if stripped.endswith("\\") and not stripped.endswith("\\\\"):
            return True
        return line.count("{") > line.count("}")

    def do_env(self, arg):
        """Prints every binding of this session."""
        print(self.runtime.environment)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to texcalc!\n\n"
              "texcalc evaluates algebra written the way it is typeset in TeX. Try typing \n"
              "'\\frac{1}{4} + 2^3'. Numbers are folded, anything else is kept symbolic: \n"
              "'(4 + 1)(x + 2)' gives '5(x + 2)'.\n\n"
              "Bind names with '\\let{x}{2}' and define functions with '\\func{f(x, y)}{x + y}'. \n"
              "Calling a function with fewer arguments curries it: '\\let{g}{f(2)}' then 'g(5)'.\n\n"
              "Type 'env' to list every binding and 'exit' to quit.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
