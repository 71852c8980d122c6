"""
CLI entry point, when used as a module: `python -m kubeobjects`.

Useful for debugging in the IDEs (use the start-mode "Module", module "kubeobjects").
"""
from kubeobjects import cli

if __name__ == '__main__':
    cli.main()
