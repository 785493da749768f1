from codoncanvas.config import load_config
from codoncanvas.engine.runner import run_genome_file
from pathlib import Path


def main():
    config = load_config()
    for genome in sorted((Path(__file__).parent / "genomes").glob("*.genome")):
        print(run_genome_file(genome, config))


if __name__ == "__main__":
    main()
