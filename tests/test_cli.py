"""
Tests for the timeresolver command line.
"""

import pytest

from timeresolver import __version__
from timeresolver_cli.cli import entrance

REFERENCE = "May 13, 2011 01:30:00"


class TestEntrance:

    def test_resolve(self, capsys):
        assert entrance(["tomorrow", "--reference", REFERENCE]) == 0
        assert capsys.readouterr().out == "2011-05-14 01:30:00\n"

    def test_format(self, capsys):
        entrance(["next monday", "-r", REFERENCE, "-f", "%A %d %B"])
        assert capsys.readouterr().out == "Monday 16 May\n"

    def test_explain(self, capsys):
        entrance(["5 days and 2 hours", "-r", REFERENCE, "--explain"])
        assert capsys.readouterr().out == "text: 5 day 2 hour\n"

    def test_explain_normal_form(self, capsys):
        entrance([REFERENCE, "--explain"])
        out = capsys.readouterr().out.splitlines()
        assert out == ["text: ", "normal: 2011-05-13 01:30:00.000"]

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            entrance(["--version"])
        assert __version__ in capsys.readouterr().out
