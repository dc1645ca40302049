"""End-to-end RLK and RLP identification workflows.

RLK workflow (``RLKPipeline``):
    1. Scan proteins with hmmscan (reused when the report exists)
    2. Select proteins with a significant kinase-family hit
    3. Predict topology of those proteins with TMbed (reused likewise)
    4. Merge, filter and order hits; relabel kinase hits
    5. Classify and write ``RLK.tsv`` / ``RLK.others.tsv``

RLP workflow (``RLPPipeline``):
    1. Read an existing domain report and TMbed prediction file
    2. Merge, filter and order hits
    3. Keep transmembrane proteins and significant hits
    4. Classify and write ``RLP.tsv``

All files land in one output directory. Tables are only written once
fully computed; a run that aborts leaves earlier tables untouched.

Example:
    >>> from receptorscan.core.pipeline import RLKPipeline
    >>> pipeline = RLKPipeline("result", hmm_database="Pfam-A.hmm")
    >>> result = pipeline.run("proteins.fa")
    >>> len(result.primary)
    42
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path

import attrs

from receptorscan.annotate.runners import HmmscanRunner, TMbedRunner
from receptorscan.config import Config
from receptorscan.core.classify import (
    classify_rlk_labels,
    classify_rlp_labels,
    kinase_proteins,
    proteins_with_transmembrane,
    relabel_kinases,
    significant_hits,
)
from receptorscan.core.filter import resolve_domains, sort_by_evalue
from receptorscan.core.merge import merge_annotations
from receptorscan.core.models import (
    Classification,
    ProteinDomains,
    architecture_labels,
    group_records,
)
from receptorscan.io.fasta import ProteinAccessor
from receptorscan.io.hmmer import read_domain_report, write_domain_tsv
from receptorscan.io.tables import (
    read_final_domains,
    write_classifications,
    write_final_domains,
    write_id_list,
)
from receptorscan.io.tmbed import read_tmbed_predictions
from receptorscan.utils.logging import Timer, log_run_start

logger = logging.getLogger(__name__)

# =============================================================================
# Output File Names
# =============================================================================

LOG_FILE = "log.txt"
HMMSCAN_REPORT = "pfam.txt"
DOMAIN_TABLE = "pfam.tsv"
KINASE_LIST = "Pro.KD.lst"
KINASE_FASTA = "Pro.KD.fa"
KINASE_PREDICTIONS = "Pro.KD.pred"
FINAL_DOMAINS = "Pro.final.domain.tsv"
RLK_TABLE = "RLK.tsv"
RLK_OTHERS_TABLE = "RLK.others.tsv"
RLP_TABLE = "RLP.tsv"


# =============================================================================
# Exceptions and Enums
# =============================================================================


class MissingRequiredInputError(RuntimeError):
    """Raised when a run lacks an annotation source it cannot do without."""


class Workflow(Enum):
    """Classification rule set."""

    RLK = "rlk"
    RLP = "rlp"


# =============================================================================
# Results
# =============================================================================


@attrs.define
class RLKResult:
    """Outcome of the RLK workflow.

    Attributes:
        domains: Final per-protein hits (kinase proteins only).
        classifications: One record per kinase protein.
        kinase_proteins: Proteins with a significant kinase-family hit.
    """

    domains: ProteinDomains
    classifications: list[Classification]
    kinase_proteins: list[str] = attrs.Factory(list)

    @property
    def primary(self) -> list[Classification]:
        """RLK and RLK_WE records."""
        return [record for record in self.classifications if record.architecture.is_primary]

    @property
    def secondary(self) -> list[Classification]:
        """RLK_RvrTMD and Others records."""
        return [record for record in self.classifications if not record.architecture.is_primary]


@attrs.define
class RLPResult:
    """Outcome of the RLP workflow.

    Attributes:
        domains: Final per-protein hits (transmembrane proteins only).
        classifications: RLP and RLPUN records.
    """

    domains: ProteinDomains
    classifications: list[Classification]


# =============================================================================
# RLK Workflow
# =============================================================================


class RLKPipeline:
    """Identify receptor-like kinases in a protein FASTA file.

    Attributes:
        outdir: Output directory.
        config: Thresholds and tool settings.
        hmm_database: HMM database for hmmscan; needed only when the
            hmmscan report does not exist yet or ``force_scan`` is set.
        force_scan: Re-run hmmscan even if its report exists.
        force_topology: Re-run TMbed even if its predictions exist.
    """

    def __init__(
        self,
        outdir: Path | str,
        hmm_database: Path | str | None = None,
        config: Config | None = None,
        force_scan: bool = False,
        force_topology: bool = False,
    ) -> None:
        self.outdir = Path(outdir)
        self.hmm_database = Path(hmm_database) if hmm_database else None
        self.config = config or Config()
        self.force_scan = force_scan
        self.force_topology = force_topology

    def path(self, name: str) -> Path:
        """Path of an output file."""
        return self.outdir / name

    def scan_domains(self, proteins_fasta: Path | str) -> Path:
        """Run hmmscan unless its report already exists.

        Raises:
            MissingRequiredInputError: If hmmscan must run but no HMM
                database was given.
            RuntimeError: If hmmscan fails.
        """
        report = self.path(HMMSCAN_REPORT)
        if report.is_file() and not self.force_scan:
            logger.info(f"hmmscan report {report} already exists, reusing it")
            return report

        if self.hmm_database is None:
            raise MissingRequiredInputError("An HMM database is required to run hmmscan")

        runner = HmmscanRunner(
            self.hmm_database,
            threads=self.config.hmmscan.threads,
            evalue=self.config.hmmscan.evalue,
        )
        return runner.run(proteins_fasta, report)

    def predict_topology(self, kinase_fasta: Path | str) -> Path:
        """Run TMbed unless its predictions already exist."""
        predictions = self.path(KINASE_PREDICTIONS)
        if predictions.is_file() and not self.force_topology:
            logger.info(f"TMbed predictions {predictions} already exist, reusing them")
            return predictions

        runner = TMbedRunner(
            batch_size=self.config.tmbed.batch_size,
            use_gpu=self.config.tmbed.use_gpu,
        )
        return runner.run(kinase_fasta, predictions)

    def select_kinase_proteins(self, domains: ProteinDomains) -> list[str]:
        """Find proteins with a significant kinase-family hit.

        Raises:
            MissingRequiredInputError: If there are none.
        """
        classifier = self.config.classifier
        selected = kinase_proteins(domains, classifier.kinase_families, classifier.kinase_evalue)
        if not selected:
            raise MissingRequiredInputError("No proteins with kinase domains detected")
        logger.info(f"Detected {len(selected)} proteins with kinase domains")
        return selected

    def reconcile(
        self,
        domains: ProteinDomains,
        topologies: Mapping[str, str],
        selected: Sequence[str],
        sequence_lengths: Mapping[str, int] | None = None,
    ) -> RLKResult:
        """Merge, filter, relabel and classify.

        Args:
            domains: Domain-scan hits per protein, mutated in place.
            topologies: ``{protein_id: topology_string}``.
            selected: Kinase proteins to classify, in output order.
            sequence_lengths: Optional lengths for topology validation.

        Returns:
            RLKResult with the final hits and classifications.
        """
        classifier = self.config.classifier

        merge_annotations(domains, topologies, sequence_lengths)
        resolve_domains(domains)

        final = relabel_kinases(
            domains,
            selected,
            classifier.kinase_families,
            classifier.kinase_evalue,
            classifier.domain_evalue,
        )
        classifications = classify_rlk_labels(architecture_labels(final))
        return RLKResult(domains=final, classifications=classifications, kinase_proteins=list(selected))

    def write_results(self, result: RLKResult) -> None:
        """Write the final domain table and both RLK tables."""
        write_final_domains(result.domains, self.path(FINAL_DOMAINS))
        write_classifications(result.primary, self.path(RLK_TABLE))
        write_classifications(result.secondary, self.path(RLK_OTHERS_TABLE))

    def run(self, proteins_fasta: Path | str) -> RLKResult:
        """Run the complete RLK workflow.

        Args:
            proteins_fasta: Protein FASTA file.

        Returns:
            RLKResult; tables are written to the output directory.

        Raises:
            MissingRequiredInputError: If no domain hits, no kinase
                proteins or no topology predictions are found.
            RuntimeError: If an external tool fails.
        """
        self.outdir.mkdir(parents=True, exist_ok=True)
        log_run_start(
            logger,
            "RLK identification",
            Input=proteins_fasta,
            Database=self.hmm_database,
            Output=self.outdir,
        )

        with Timer("RLK identification", logger):
            with ProteinAccessor(proteins_fasta) as proteins:
                lengths = proteins.lengths
                logger.info(f"Scanning {len(proteins)} proteins")

                report = self.scan_domains(proteins_fasta)
                records = read_domain_report(report)
                if not records:
                    raise MissingRequiredInputError(f"No domain hits found in {report}")

                domains = sort_by_evalue(group_records(records))
                write_domain_tsv(domains, self.path(DOMAIN_TABLE))

                selected = self.select_kinase_proteins(domains)
                write_id_list(selected, self.path(KINASE_LIST))
                proteins.write_subset(selected, self.path(KINASE_FASTA))

            predictions = read_tmbed_predictions(self.predict_topology(self.path(KINASE_FASTA)))
            if not predictions:
                raise MissingRequiredInputError("TMbed produced no topology predictions")
            if len(predictions) < len(selected):
                logger.warning(
                    f"TMbed predicted {len(predictions)} of {len(selected)} kinase proteins; "
                    f"check {self.path(KINASE_FASTA)}"
                )
            else:
                logger.info("All proteins with kinase domains were predicted by TMbed")

            topologies = {protein_id: record.topology for protein_id, record in predictions.items()}
            result = self.reconcile(domains, topologies, selected, lengths)
            self.write_results(result)

        logger.info(f"{len(result.primary)} RLKs scanned")
        return result


# =============================================================================
# RLP Workflow
# =============================================================================


class RLPPipeline:
    """Identify receptor-like proteins from existing annotation reports.

    Attributes:
        outdir: Output directory.
        config: Thresholds.
    """

    def __init__(self, outdir: Path | str, config: Config | None = None) -> None:
        self.outdir = Path(outdir)
        self.config = config or Config()

    def path(self, name: str) -> Path:
        """Path of an output file."""
        return self.outdir / name

    def reconcile(
        self,
        domains: ProteinDomains,
        topologies: Mapping[str, str],
        sequence_lengths: Mapping[str, int] | None = None,
    ) -> RLPResult:
        """Merge, filter, select and classify.

        Args:
            domains: Domain-scan hits per protein, mutated in place.
            topologies: ``{protein_id: topology_string}``.
            sequence_lengths: Optional lengths for topology validation.

        Returns:
            RLPResult with the final hits and classifications.
        """
        merge_annotations(domains, topologies, sequence_lengths)
        resolve_domains(domains)

        candidates = proteins_with_transmembrane(domains)
        final = significant_hits(domains, candidates, self.config.classifier.rlp_evalue)
        classifications = classify_rlp_labels(architecture_labels(final))
        return RLPResult(domains=final, classifications=classifications)

    def run(
        self,
        domain_report: Path | str,
        predictions: Path | str,
        proteins_fasta: Path | str | None = None,
        report_format: str | None = None,
    ) -> RLPResult:
        """Run the complete RLP workflow.

        Args:
            domain_report: hmmscan report or canonical domain TSV.
            predictions: TMbed ``.pred`` file.
            proteins_fasta: Optional FASTA used to validate topology lengths.
            report_format: Report format; detected from the suffix if None.

        Returns:
            RLPResult; tables are written to the output directory.

        Raises:
            MissingRequiredInputError: If either report is empty.
        """
        self.outdir.mkdir(parents=True, exist_ok=True)
        log_run_start(
            logger,
            "RLP identification",
            Domains=domain_report,
            Topology=predictions,
            Input=proteins_fasta,
            Output=self.outdir,
        )

        with Timer("RLP identification", logger):
            records = read_domain_report(domain_report, report_format)
            if not records:
                raise MissingRequiredInputError(f"No domain hits found in {domain_report}")

            topology_records = read_tmbed_predictions(predictions)
            if not topology_records:
                raise MissingRequiredInputError(f"No topology predictions found in {predictions}")

            lengths = None
            if proteins_fasta is not None:
                with ProteinAccessor(proteins_fasta) as proteins:
                    lengths = proteins.lengths

            topologies = {protein_id: record.topology for protein_id, record in topology_records.items()}
            result = self.reconcile(group_records(records), topologies, lengths)

            write_final_domains(result.domains, self.path(FINAL_DOMAINS))
            write_classifications(result.classifications, self.path(RLP_TABLE), kinase_counts=False)

        return result


# =============================================================================
# Checkpoint Classification
# =============================================================================


def classify_final_domains(
    final_domains: Path | str,
    outdir: Path | str,
    workflow: Workflow | str = Workflow.RLK,
) -> list[Classification]:
    """Classify proteins from a previously written final domain table.

    Args:
        final_domains: ``Name, Label, Start, End`` table.
        outdir: Directory for the classification tables.
        workflow: Rule set to apply.

    Returns:
        Classification records written to the tables.
    """
    workflow = Workflow(workflow)
    outdir = Path(outdir)

    architectures = read_final_domains(final_domains)
    logger.info(f"Read architectures of {len(architectures)} proteins from {final_domains}")

    if workflow == Workflow.RLK:
        classifications = classify_rlk_labels(architectures)
        write_classifications(
            [record for record in classifications if record.architecture.is_primary],
            outdir / RLK_TABLE,
        )
        write_classifications(
            [record for record in classifications if not record.architecture.is_primary],
            outdir / RLK_OTHERS_TABLE,
        )
    else:
        classifications = classify_rlp_labels(architectures)
        write_classifications(classifications, outdir / RLP_TABLE, kinase_counts=False)

    return classifications
