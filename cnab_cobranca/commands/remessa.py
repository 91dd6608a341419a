import argparse
import json
import sys

from pydantic import ValidationError

from . import CliBlueprint, STATE_FILE, _carregar, _arquivar, _salvar_arquivo
from ..models import BoletoData
from ..state import get_ultimo_sequencial, set_ultimo_sequencial, salvar_estado


def _ler_boletos(caminho: str) -> list[BoletoData]:
    try:
        with open(caminho, encoding="utf-8") as f:
            dados = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Erro: nao foi possivel ler {caminho}: {e}")
        sys.exit(1)
    if not isinstance(dados, list):
        print(f"Erro: {caminho} deve conter uma lista de boletos")
        sys.exit(1)
    try:
        return [BoletoData.model_validate(item) for item in dados]
    except ValidationError as e:
        print(f"Erro: boleto invalido em {caminho}:")
        for err in e.errors():
            print(f"  {'.'.join(map(str, err['loc']))}: {err['msg']}")
        sys.exit(1)


def cmd_remessa(args):
    config, estado = _carregar(args)
    boletos = _ler_boletos(args.boletos)
    banco = config.banco.value

    if args.sequencial is not None:
        sequencial = args.sequencial
    else:
        sequencial = get_ultimo_sequencial(estado, banco, config.convenio) + 1

    print(f"Cedente: {args.cedente} ({config.cedente})")
    print(f"Banco: {banco} - {config.banco.nome}")
    print(f"Sequencial do arquivo: {sequencial}")
    print(f"Titulos: {len(boletos)}")
    print()

    from ..remessa import gerar_remessa_cobranca
    resultado = gerar_remessa_cobranca(config, boletos, sequencial)

    if not resultado.sucesso:
        print("ERRO na geracao da remessa:")
        for erro in resultado.erros:
            print(f"  {erro}")
        sys.exit(1)

    arquivo = _salvar_arquivo(args.saida, resultado.nome_arquivo, resultado.conteudo)
    _arquivar(resultado.conteudo, "remessa", f"{banco}-{sequencial}")

    print("=== RESULTADO ===")
    print(f"  Arquivo: {arquivo}")
    print(f"  Titulos: {resultado.total_registros}")
    print(f"  Valor total: {resultado.valor_total}")

    if args.sequencial is None or args.sequencial > get_ultimo_sequencial(estado, banco, config.convenio):
        set_ultimo_sequencial(estado, banco, config.convenio, sequencial)
        salvar_estado(STATE_FILE, estado)
        print(f"  Sequencial {sequencial} salvo em {STATE_FILE}")


class RemessaBlueprint(CliBlueprint):
    def register(self, subparsers, parser) -> None:
        p = subparsers.add_parser(
            "remessa",
            help=argparse.SUPPRESS,
            description="Gera arquivo remessa CNAB240 de cobranca a partir de uma lista de boletos em JSON.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                "Exemplos:\n"
                "  cnab-cobranca remessa MINHAEMPRESA boletos.json\n"
                "  cnab-cobranca remessa MINHAEMPRESA boletos.json --sequencial 12 --saida /tmp/remessas"
            ),
        )
        p.add_argument("cedente", help="Nome do cedente (secao no cnab-cobranca.conf.ini)")
        p.add_argument("boletos", help="Arquivo JSON com a lista de boletos")
        p.add_argument("--sequencial", type=int, default=None, help="Sequencial do arquivo (padrao: ultimo salvo + 1)")
        p.add_argument("--saida", default="remessas", help="Pasta onde o arquivo .rem sera gravado")
        p.set_defaults(func=cmd_remessa)
