import argparse
import sys
from datetime import date
from decimal import Decimal, InvalidOperation

from . import CliBlueprint, _carregar, _ler_arquivo
from ..boleto import (
    calcular_fator_vencimento,
    extrair_info_codigo_barras,
    gerar_boleto,
    linha_digitavel_para_codigo_barras,
    validar_codigo_barras,
    validar_linha_digitavel,
)
from ..campo_livre import gerar_campo_livre
from ..formatacao import apenas_digitos
from ..models import BoletoBarcodeParams


def _data(valor: str) -> date:
    try:
        return date.fromisoformat(valor)
    except ValueError:
        raise argparse.ArgumentTypeError(f"data invalida: '{valor}' (use AAAA-MM-DD)") from None


def _valor(valor: str) -> Decimal:
    try:
        return Decimal(valor.replace(",", "."))
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"valor invalido: '{valor}'") from None


def cmd_boleto(args):
    config, _ = _carregar(args)

    params = BoletoBarcodeParams(
        bank_code=config.banco,
        fator_vencimento=calcular_fator_vencimento(args.vencimento),
        valor=args.valor,
        campo_livre=gerar_campo_livre(config, args.nosso_numero),
    )
    boleto = gerar_boleto(params)

    print(f"Cedente: {args.cedente} ({config.cedente})")
    print(f"Banco: {config.banco.value} - {config.banco.nome}")
    print(f"Vencimento: {args.vencimento.strftime('%d/%m/%Y')}  Valor: {args.valor}")
    print()
    print(f"Codigo de barras: {boleto.codigo_barras}")
    print(f"Linha digitavel:  {boleto.linha_digitavel}")


def cmd_validar(args):
    digitos = apenas_digitos(args.codigo)
    if len(digitos) == 47:
        validacao = validar_linha_digitavel(digitos)
        codigo = linha_digitavel_para_codigo_barras(digitos)
        print("Tipo: linha digitavel")
    else:
        validacao = validar_codigo_barras(args.codigo.strip())
        codigo = args.codigo.strip()
        print("Tipo: codigo de barras")

    if not validacao.valido:
        print("INVALIDO:")
        for erro in validacao.erros:
            print(f"  {erro}")
        sys.exit(1)

    info = extrair_info_codigo_barras(codigo)
    print("VALIDO")
    print(f"  Codigo de barras: {codigo}")
    print(f"  Banco: {info.banco}")
    print(f"  Moeda: {info.moeda}")
    print(f"  Fator de vencimento: {info.fator_vencimento}")
    print(f"  Vencimento: {info.data_vencimento.strftime('%d/%m/%Y')}")
    print(f"  Valor: {info.valor}")
    print(f"  Campo livre: {info.campo_livre}")


def cmd_validar_arquivo(args):
    conteudo = _ler_arquivo(args.arquivo)

    from ..remessa import validar_cnab240
    validacao = validar_cnab240(conteudo)

    if not validacao.valido:
        print(f"INVALIDO: {args.arquivo}")
        for erro in validacao.erros:
            print(f"  {erro}")
        sys.exit(1)
    print(f"VALIDO: {args.arquivo}")


class BoletoBlueprint(CliBlueprint):
    def register(self, subparsers, parser) -> None:
        p_boleto = subparsers.add_parser(
            "boleto",
            help=argparse.SUPPRESS,
            description="Gera codigo de barras e linha digitavel de um boleto do cedente.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="Exemplo:\n  cnab-cobranca boleto MINHAEMPRESA --nosso-numero 123 --vencimento 2025-03-10 --valor 150.00",
        )
        p_boleto.add_argument("cedente", help="Nome do cedente (secao no cnab-cobranca.conf.ini)")
        p_boleto.add_argument("--nosso-numero", required=True, help="Nosso numero do titulo")
        p_boleto.add_argument("--vencimento", required=True, type=_data, help="Data de vencimento (AAAA-MM-DD)")
        p_boleto.add_argument("--valor", required=True, type=_valor, help="Valor do titulo (ex.: 150.00)")
        p_boleto.set_defaults(func=cmd_boleto)

        p_validar = subparsers.add_parser(
            "validar",
            help=argparse.SUPPRESS,
            description="Valida um codigo de barras (44 digitos) ou uma linha digitavel (47 digitos).",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                "Exemplos:\n"
                "  cnab-cobranca validar 00193373700000001000500940144816060680935031\n"
                "  cnab-cobranca validar '00190.50095 40144.816069 06809.350314 3 37370000000100'"
            ),
        )
        p_validar.add_argument("codigo", help="Codigo de barras ou linha digitavel")
        p_validar.set_defaults(func=cmd_validar)

        p_arquivo = subparsers.add_parser(
            "validar-arquivo",
            help=argparse.SUPPRESS,
            description="Valida a estrutura de um arquivo CNAB240 (remessa ou retorno).",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="Exemplo:\n  cnab-cobranca validar-arquivo remessas/CNAB240_001_20250310_000001.rem",
        )
        p_arquivo.add_argument("arquivo", help="Arquivo CNAB240")
        p_arquivo.set_defaults(func=cmd_validar_arquivo)
