import argparse
import sys

from pydantic import ValidationError

from .commands.boleto import BoletoBlueprint
from .commands.remessa import RemessaBlueprint
from .commands.retorno import RetornoBlueprint
from .exceptions import CnabConfigError, CnabError

BLUEPRINTS = (RemessaBlueprint(), RetornoBlueprint(), BoletoBlueprint())


def cli(argv=None):
    parser = argparse.ArgumentParser(
        prog="cnab-cobranca",
        description="Cobranca bancaria: remessa e retorno CNAB240, codigo de barras e linha digitavel de boletos.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Arquivos CNAB240:\n"
            "  remessa          Gerar arquivo remessa de cobranca a partir de boletos em JSON\n"
            "  retorno          Processar arquivo retorno e listar ocorrencias\n"
            "  validar-arquivo  Validar a estrutura de um arquivo CNAB240\n"
            "\n"
            "Boletos:\n"
            "  boleto           Gerar codigo de barras e linha digitavel\n"
            "  validar          Validar codigo de barras ou linha digitavel\n"
            "\n"
            "Exemplos:\n"
            "  cnab-cobranca remessa  EMPRESA boletos.json\n"
            "  cnab-cobranca retorno  RET001.ret --pagos\n"
            "  cnab-cobranca boleto   EMPRESA --nosso-numero 123 --vencimento 2025-03-10 --valor 150.00\n"
            "  cnab-cobranca validar  00193373700000001000500940144816060680935031\n"
        ),
    )
    sub = parser.add_subparsers(dest="comando", required=True, metavar="<comando>")

    # remove o grupo de subparsers do help (os grupos ficam no epilog formatado)
    parser._action_groups = [
        g for g in parser._action_groups
        if not any(isinstance(a, argparse._SubParsersAction) for a in g._group_actions)
    ]

    for blueprint in BLUEPRINTS:
        blueprint.register(sub, parser)

    args = parser.parse_args(argv)

    try:
        args.func(args)
    except CnabConfigError as e:
        print(f"Erro de configuracao: {e}")
        print()
        print("Crie o arquivo cnab-cobranca.conf.ini no diretorio atual com o conteudo:")
        print()
        print("[MINHAEMPRESA]")
        print("banco = 001                    # 001, 033, 104, 237, 341 ou 756")
        print("agencia = 1234                 # agencia sem digito")
        print("agencia_digito = 5             # opcional")
        print("conta = 123456                 # conta sem digito")
        print("conta_digito = 7")
        print("convenio = 1234567             # convenio / codigo do cedente")
        print("carteira = 17")
        print("cedente = EMPRESA TESTE LTDA")
        print("documento = 11222333000181     # CNPJ ou CPF do cedente")
        sys.exit(1)
    except ValidationError as e:
        print("Erro de validacao:")
        for err in e.errors():
            print(f"  {'.'.join(map(str, err['loc']))}: {err['msg']}")
        sys.exit(1)
    except CnabError as e:
        print(f"Erro: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
