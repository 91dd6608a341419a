import argparse
import os
import sys

from . import CliBlueprint, _arquivar, _ler_arquivo
from ..results import DetalheT


def cmd_retorno(args):
    conteudo = _ler_arquivo(args.arquivo)

    from ..retorno import parse_retorno_cnab240, extrair_titulos_pagos
    resultado = parse_retorno_cnab240(conteudo)

    _arquivar(conteudo, "retorno", os.path.basename(args.arquivo))

    if not resultado.sucesso:
        print("ERRO ao processar retorno:")
        for erro in resultado.erros:
            print(f"  {erro}")
        sys.exit(1)

    print(f"Banco: {resultado.banco}")
    print()

    if args.pagos:
        print("=== TITULOS PAGOS ===")
        for titulo in extrair_titulos_pagos(resultado):
            data = titulo.data_pagamento.strftime("%d/%m/%Y") if titulo.data_pagamento else "-"
            tarifa = f"  tarifa={titulo.valor_tarifa}" if titulo.valor_tarifa is not None else ""
            print(f"  {titulo.nosso_numero}  {titulo.seu_numero or '-'}  pago={titulo.valor_pago}  em {data}{tarifa}")
    else:
        print("=== TITULOS ===")
        for registro in resultado.registros:
            if isinstance(registro, DetalheT):
                print(f"  {registro.nosso_numero}  [{registro.codigo_ocorrencia}] {registro.descricao_ocorrencia}")

    print()
    print("=== RESULTADO ===")
    print(f"  Pagos: {resultado.total_pagos}")
    print(f"  Rejeitados: {resultado.total_rejeitados}")
    print(f"  Valor total pago: {resultado.valor_total}")


class RetornoBlueprint(CliBlueprint):
    def register(self, subparsers, parser) -> None:
        p = subparsers.add_parser(
            "retorno",
            help=argparse.SUPPRESS,
            description="Processa arquivo retorno CNAB240 e exibe as ocorrencias dos titulos.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="Exemplos:\n  cnab-cobranca retorno RET001.ret\n  cnab-cobranca retorno RET001.ret --pagos",
        )
        p.add_argument("arquivo", help="Arquivo retorno CNAB240")
        p.add_argument("--pagos", action="store_true", help="Listar apenas os titulos pagos")
        p.set_defaults(func=cmd_retorno)
