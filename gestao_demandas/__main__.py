"""Allow ``python -m gestao_demandas``."""

from gestao_demandas.server import main

if __name__ == "__main__":
    main()
