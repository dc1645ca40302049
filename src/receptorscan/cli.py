"""Command-line interface for receptorscan.

This module provides the main entry point for the receptorscan CLI tool.
It uses Click to define the workflow and utility commands.

Commands:
    rlk: Identify receptor-like kinases from a protein FASTA file
    rlp: Identify receptor-like proteins from domain and topology reports
    classify: Re-classify proteins from a final domain table
    domains: Convert an hmmscan report into a domain TSV
    topology: Convert TMbed predictions into topology segments
    hmm-info: List profile metadata of an HMM database

Example:
    $ receptorscan --help
    $ receptorscan rlk -i proteins.fa -d Pfam-A.hmm -o result -t 8
    $ receptorscan rlp --domains pfam.tsv --pred proteins.pred -o rlp_result
    $ receptorscan classify result/Pro.final.domain.tsv -o result --workflow rlk
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from receptorscan.config import Config
from receptorscan.utils.logging import setup_logging

# Initialize rich console for pretty output
console = Console()

REPORT_FORMAT_CHOICES = ["hmmer3-text", "hmmscan3-domtab", "tsv"]


def _configure(ctx: click.Context, outdir: Optional[Path], config_path: Optional[Path]) -> Config:
    """Set up logging into ``outdir/log.txt`` and load the configuration."""
    from receptorscan.core.pipeline import LOG_FILE

    verbosity = 0 if ctx.obj.get("quiet") else 2 if ctx.obj.get("verbose") else 1
    log_file = outdir / LOG_FILE if outdir is not None else None
    setup_logging(verbosity=verbosity, log_file=log_file)
    return Config.load(config_path)


def _fail(ctx: click.Context, error: Exception) -> None:
    console.print(f"[red]Error:[/red] {error}")
    if ctx.obj.get("verbose"):
        import traceback
        traceback.print_exc()
    raise SystemExit(1)


@click.group()
@click.version_option(prog_name="receptorscan")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """receptorscan: Identify receptor-like kinases and receptor-like proteins.

    receptorscan combines Pfam domain hits from hmmscan with signal peptide
    and transmembrane predictions from TMbed, and classifies proteins by the
    N-to-C order of their domains.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# =============================================================================
# rlk command
# =============================================================================


@main.command()
@click.option(
    "-i",
    "--input",
    "proteins",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Protein FASTA file.",
)
@click.option(
    "-d",
    "--database",
    type=click.Path(exists=True, path_type=Path),
    help="Pfam HMM database for hmmscan (not needed when pfam.txt exists).",
)
@click.option(
    "-o",
    "--outdir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("result"),
    show_default=True,
    help="Output directory.",
)
@click.option(
    "-t",
    "--threads",
    type=int,
    help="hmmscan worker threads [default: 1].",
)
@click.option(
    "-e",
    "--evalue",
    type=float,
    help="hmmscan reporting e-value (-E and --domE) [default: 0.1].",
)
@click.option(
    "-b",
    "--batch-size",
    type=int,
    help="TMbed batch size, the approximate number of residues per batch [default: 1].",
)
@click.option(
    "--gpu/--no-gpu",
    default=None,
    help="Run TMbed on a GPU [default: gpu].",
)
@click.option("--force-scan", is_flag=True, help="Re-run hmmscan even if pfam.txt exists.")
@click.option("--force-tmd", is_flag=True, help="Re-run TMbed even if Pro.KD.pred exists.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="TOML configuration file.",
)
@click.pass_context
def rlk(
    ctx: click.Context,
    proteins: Path,
    database: Optional[Path],
    outdir: Path,
    threads: Optional[int],
    evalue: Optional[float],
    batch_size: Optional[int],
    gpu: Optional[bool],
    force_scan: bool,
    force_tmd: bool,
    config_path: Optional[Path],
) -> None:
    """Identify receptor-like kinases in a protein FASTA file.

    \b
    Steps performed:
    1. Scan proteins against Pfam with hmmscan
    2. Keep proteins with a kinase domain (e-value <= 1e-10)
    3. Predict signal peptides and transmembrane segments with TMbed
    4. Resolve overlapping domains and order them N- to C-terminal
    5. Classify into RLK, RLK_WE, RLK_RvrTMD and Others

    \b
    Output files (in --outdir):
    - pfam.txt, pfam.tsv: hmmscan report and all hits
    - Pro.KD.lst, Pro.KD.fa, Pro.KD.pred: kinase proteins and topology
    - Pro.final.domain.tsv: final domain architecture
    - RLK.tsv, RLK.others.tsv: classification tables
    - log.txt: run log (appended)

    \b
    Examples:
        $ receptorscan rlk -i proteins.fa -d Pfam-A.hmm -o result -t 8
    """
    from receptorscan.core.pipeline import RLKPipeline

    quiet = ctx.obj.get("quiet", False)

    try:
        config = _configure(ctx, outdir, config_path)
        if threads is not None:
            config.hmmscan.threads = threads
        if evalue is not None:
            config.hmmscan.evalue = evalue
        if batch_size is not None:
            config.tmbed.batch_size = batch_size
        if gpu is not None:
            config.tmbed.use_gpu = gpu

        pipeline = RLKPipeline(
            outdir,
            hmm_database=database,
            config=config,
            force_scan=force_scan,
            force_topology=force_tmd,
        )
        result = pipeline.run(proteins)

        if not quiet:
            counts = {}
            for record in result.classifications:
                counts[record.architecture.value] = counts.get(record.architecture.value, 0) + 1

            console.print("")
            console.print("[bold]RLK Summary:[/bold]")
            console.print(f"  Kinase proteins:  {len(result.kinase_proteins):,}")
            for name in ("RLK", "RLK_WE", "RLK_RvrTMD", "Others"):
                console.print(f"  {name + ':':<17} {counts.get(name, 0):,}")
            console.print("")
            console.print(f"[green]Wrote RLK tables:[/green] {outdir}")

    except Exception as e:
        _fail(ctx, e)


# =============================================================================
# rlp command
# =============================================================================


@main.command()
@click.option(
    "--domains",
    "domain_report",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Domain report: hmmscan output, hmmscan --domtblout or domain TSV.",
)
@click.option(
    "--pred",
    "predictions",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="TMbed prediction file.",
)
@click.option(
    "-i",
    "--input",
    "proteins",
    type=click.Path(exists=True, path_type=Path),
    help="Protein FASTA used to check topology lengths.",
)
@click.option(
    "--format",
    "report_format",
    type=click.Choice(REPORT_FORMAT_CHOICES),
    help="Domain report format [default: detected from the file suffix].",
)
@click.option(
    "-o",
    "--outdir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("result"),
    show_default=True,
    help="Output directory.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="TOML configuration file.",
)
@click.pass_context
def rlp(
    ctx: click.Context,
    domain_report: Path,
    predictions: Path,
    proteins: Optional[Path],
    report_format: Optional[str],
    outdir: Path,
    config_path: Optional[Path],
) -> None:
    """Identify receptor-like proteins from existing annotation reports.

    \b
    Output files (in --outdir):
    - Pro.final.domain.tsv: final domain architecture of TMD proteins
    - RLP.tsv: RLP and RLPUN proteins
    - log.txt: run log (appended)

    \b
    Examples:
        $ receptorscan rlp --domains pfam.txt --pred proteins.pred -o rlp_result
    """
    from receptorscan.core.pipeline import RLPPipeline

    quiet = ctx.obj.get("quiet", False)

    try:
        config = _configure(ctx, outdir, config_path)
        pipeline = RLPPipeline(outdir, config=config)
        result = pipeline.run(domain_report, predictions, proteins, report_format)

        if not quiet:
            n_unknown = sum(1 for record in result.classifications if record.ecd is None)
            console.print("")
            console.print("[bold]RLP Summary:[/bold]")
            console.print(f"  TMD proteins:  {len(result.domains):,}")
            console.print(f"  RLP:           {len(result.classifications) - n_unknown:,}")
            console.print(f"  RLPUN:         {n_unknown:,}")
            console.print("")
            console.print(f"[green]Wrote RLP table:[/green] {outdir}")

    except Exception as e:
        _fail(ctx, e)


# =============================================================================
# classify command
# =============================================================================


@main.command()
@click.argument("final_domains", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--outdir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("result"),
    show_default=True,
    help="Output directory.",
)
@click.option(
    "--workflow",
    type=click.Choice(["rlk", "rlp"]),
    default="rlk",
    show_default=True,
    help="Classification rules to apply.",
)
@click.pass_context
def classify(ctx: click.Context, final_domains: Path, outdir: Path, workflow: str) -> None:
    """Classify proteins from a final domain table (Name, Label, Start, End).

    \b
    Examples:
        $ receptorscan classify result/Pro.final.domain.tsv -o result
    """
    from receptorscan.core.pipeline import classify_final_domains

    quiet = ctx.obj.get("quiet", False)

    try:
        _configure(ctx, outdir, None)
        classifications = classify_final_domains(final_domains, outdir, workflow)

        if not quiet:
            n_primary = sum(1 for record in classifications if record.architecture.is_primary)
            console.print(
                f"[green]Classified {len(classifications):,} proteins[/green] "
                f"({n_primary:,} {workflow.upper()}-type) into {outdir}"
            )

    except Exception as e:
        _fail(ctx, e)


# =============================================================================
# Utility commands
# =============================================================================


@main.command()
@click.argument("report", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output domain TSV.",
)
@click.option(
    "--format",
    "report_format",
    type=click.Choice(REPORT_FORMAT_CHOICES),
    help="Report format [default: detected from the file suffix].",
)
@click.pass_context
def domains(ctx: click.Context, report: Path, output: Path, report_format: Optional[str]) -> None:
    """Convert an hmmscan report into a Name, Label, Evalue, Start, End table."""
    from receptorscan.io.hmmer import read_domain_report, write_domain_records

    try:
        _configure(ctx, None, None)
        records = read_domain_report(report, report_format)
        write_domain_records(records, output)

        if not ctx.obj.get("quiet", False):
            console.print(f"[green]Wrote {len(records):,} domain hits:[/green] {output}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument("predictions", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output topology TSV.",
)
@click.pass_context
def topology(ctx: click.Context, predictions: Path, output: Path) -> None:
    """Convert TMbed predictions into Sig_Pep / TMD segment rows."""
    from receptorscan.core.merge import topology_to_hits
    from receptorscan.io.tables import write_topology_segments
    from receptorscan.io.tmbed import read_tmbed_predictions

    try:
        _configure(ctx, None, None)
        records = read_tmbed_predictions(predictions)
        segments = {
            protein_id: topology_to_hits(record.topology) for protein_id, record in records.items()
        }
        write_topology_segments(segments, output)

        if not ctx.obj.get("quiet", False):
            console.print(f"[green]Wrote topology of {len(segments):,} proteins:[/green] {output}")

    except Exception as e:
        _fail(ctx, e)


@main.command("hmm-info")
@click.argument("database", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output profile table.",
)
@click.pass_context
def hmm_info(ctx: click.Context, database: Path, output: Path) -> None:
    """List NAME, ACC, DESC and LENG of every profile in an HMM database."""
    from receptorscan.io.hmmer import iter_hmm_profiles, write_hmm_info

    try:
        _configure(ctx, None, None)
        profiles = list(iter_hmm_profiles(database))
        write_hmm_info(profiles, output)

        if not ctx.obj.get("quiet", False):
            console.print(f"[green]Wrote {len(profiles):,} profiles:[/green] {output}")

    except Exception as e:
        _fail(ctx, e)


if __name__ == "__main__":
    main()
