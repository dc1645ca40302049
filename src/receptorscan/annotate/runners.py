"""Wrappers for the external annotation tools.

Two command-line tools feed the pipeline:

- ``hmmscan`` (HMMER 3) scans proteins against a Pfam HMM database
- ``tmbed`` predicts signal peptides and transmembrane segments

Both are run as blocking subprocesses. A non-zero exit status is raised
as RuntimeError carrying the tool's stderr.

Example:
    >>> from receptorscan.annotate.runners import HmmscanRunner
    >>> runner = HmmscanRunner("Pfam-A.hmm", threads=8, evalue=0.1)
    >>> runner.run("proteins.fa", "result/pfam.txt")
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def check_executable(executable: str) -> None:
    """Verify a tool is installed.

    Raises:
        RuntimeError: If the executable is not found in PATH.
    """
    if shutil.which(executable) is None:
        raise RuntimeError(
            f"{executable} not found in PATH. "
            f"Please install {executable} and ensure it's in your PATH."
        )


def _run_command(name: str, cmd: list[str]) -> None:
    """Run a tool command, raising RuntimeError on failure."""
    logger.debug(f"{name} command: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            check=True,
            capture_output=True,
            text=True,
        )
        if result.stderr:
            logger.debug(f"{name} output: {result.stderr}")
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"{name} failed: {e.stderr}") from e


class HmmscanRunner:
    """Run hmmscan against an HMM database.

    Example:
        >>> runner = HmmscanRunner("Pfam-A.hmm", threads=4)
        >>> runner.run("proteins.fa", "result/pfam.txt")
    """

    executable = "hmmscan"

    def __init__(
        self,
        database: Path | str,
        threads: int = 1,
        evalue: float = 0.1,
    ) -> None:
        """Initialize the runner.

        Args:
            database: Pressed HMM database (e.g. ``Pfam-A.hmm``).
            threads: Worker threads (``--cpu``).
            evalue: Reporting threshold for sequences and domains
                (``-E`` and ``--domE``).

        Raises:
            RuntimeError: If hmmscan is not installed.
        """
        self.database = Path(database)
        self.threads = threads
        self.evalue = evalue

        check_executable(self.executable)

    def build_command(self, query: Path | str, output: Path | str) -> list[str]:
        """Build the hmmscan command line."""
        return [
            self.executable,
            "--cpu", str(self.threads),
            "-E", str(self.evalue),
            "--domE", str(self.evalue),
            "--noali",
            "--notextw",
            "-o", str(output),
            str(self.database),
            str(query),
        ]

    def run(self, query: Path | str, output: Path | str) -> Path:
        """Scan proteins and write the plain-text report.

        Args:
            query: Protein FASTA.
            output: Report path.

        Returns:
            Path of the report.

        Raises:
            RuntimeError: If hmmscan fails.
        """
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)

        logger.info("Running hmmscan")
        logger.info(f"  Query: {query}")
        logger.info(f"  Database: {self.database}")

        _run_command("hmmscan", self.build_command(query, output))

        logger.info(f"hmmscan report written to: {output}")
        return output


class TMbedRunner:
    """Run TMbed topology prediction.

    Example:
        >>> runner = TMbedRunner(batch_size=10)
        >>> runner.run("result/Pro.KD.fa", "result/Pro.KD.pred")
    """

    executable = "tmbed"

    def __init__(self, batch_size: int = 1, use_gpu: bool = True) -> None:
        """Initialize the runner.

        Args:
            batch_size: Approximate number of residues per batch.
            use_gpu: Run on a GPU when one is available.

        Raises:
            RuntimeError: If tmbed is not installed.
        """
        self.batch_size = batch_size
        self.use_gpu = use_gpu

        check_executable(self.executable)

    def build_command(self, query: Path | str, output: Path | str) -> list[str]:
        """Build the tmbed command line."""
        cmd = [
            self.executable, "predict",
            "--batch-size", str(self.batch_size),
            "--use-gpu" if self.use_gpu else "--no-use-gpu",
            "-f", str(query),
            "-p", str(output),
        ]
        return cmd

    def run(self, query: Path | str, output: Path | str) -> Path:
        """Predict topology and write the ``.pred`` file.

        Args:
            query: Protein FASTA.
            output: Prediction path.

        Returns:
            Path of the prediction file.

        Raises:
            RuntimeError: If tmbed fails.
        """
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Running TMbed on {query}")
        _run_command("tmbed", self.build_command(query, output))

        logger.info(f"TMbed predictions written to: {output}")
        return output
