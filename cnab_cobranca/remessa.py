import logging
from datetime import datetime, timedelta
from decimal import Decimal

from .exceptions import CnabStructuralError, CnabValidationError
from .formatacao import (
    agora_brt,
    apenas_digitos,
    formatar_data,
    formatar_valor,
    normalizar_texto,
    pad_left,
    pad_right,
    para_centavos,
)
from .models import BANK_NAMES, BoletoData, CnabConfig
from .results import RemessaResult, ValidacaoResultado

TAMANHO_LINHA = 240
LOTE_COBRANCA = 1
VERSAO_LAYOUT_ARQUIVO = "087"
VERSAO_LAYOUT_LOTE = "045"
SEQUENCIAL_MAXIMO = 999999


def _tipo_inscricao(documento: str) -> str:
    """'1' CPF, '2' CNPJ."""
    return "1" if len(apenas_digitos(documento)) == 11 else "2"


def _alfa(valor, tamanho: int) -> str:
    return pad_right(normalizar_texto(valor), tamanho)


def _num(valor, tamanho: int) -> str:
    return pad_left(apenas_digitos(valor), tamanho)


def _conta_corrente(config: CnabConfig) -> list[str]:
    return [
        _num(config.agencia, 5),
        pad_right(config.agencia_digito, 1),
        _num(config.conta, 12),
        pad_right(config.conta_digito, 1),
        " ",
    ]


def _header_arquivo(config: CnabConfig, sequencial: int, agora: datetime) -> str:
    partes = [
        config.banco.value,                              # 001-003 banco
        "0000",                                          # 004-007 lote
        "0",                                             # 008 tipo registro
        " " * 9,                                         # 009-017
        _tipo_inscricao(config.cedente_documento),       # 018
        _num(config.cedente_documento, 14),              # 019-032
        pad_right(config.convenio, 20),                  # 033-052
        *_conta_corrente(config),                        # 053-072
        _alfa(config.cedente, 30),                       # 073-102
        _alfa(BANK_NAMES[config.banco], 30),             # 103-132
        " " * 10,                                        # 133-142
        "1",                                             # 143 remessa
        formatar_data(agora),                            # 144-151
        agora.strftime("%H%M%S"),                        # 152-157
        pad_left(sequencial, 6),                         # 158-163
        VERSAO_LAYOUT_ARQUIVO,                           # 164-166
        "00000",                                         # 167-171 densidade
        " " * 20,                                        # 172-191 reservado banco
        " " * 20,                                        # 192-211 reservado empresa
        " " * 29,                                        # 212-240
    ]
    return "".join(partes)


def _header_lote(config: CnabConfig, sequencial: int, agora: datetime) -> str:
    partes = [
        config.banco.value,                              # 001-003
        pad_left(LOTE_COBRANCA, 4),                      # 004-007
        "1",                                             # 008
        "R",                                             # 009 operacao: remessa
        "01",                                            # 010-011 servico: cobranca
        "00",                                            # 012-013
        VERSAO_LAYOUT_LOTE,                              # 014-016
        " ",                                             # 017
        _tipo_inscricao(config.cedente_documento),       # 018
        _num(config.cedente_documento, 15),              # 019-033
        pad_right(config.convenio, 20),                  # 034-053
        *_conta_corrente(config),                        # 054-073
        _alfa(config.cedente, 30),                       # 074-103
        " " * 40,                                        # 104-143 mensagem 1
        " " * 40,                                        # 144-183 mensagem 2
        pad_left(sequencial, 8),                         # 184-191 numero remessa
        formatar_data(agora),                            # 192-199 data gravacao
        "00000000",                                      # 200-207 data credito
        " " * 33,                                        # 208-240
    ]
    return "".join(partes)


def _juros(boleto: BoletoData) -> list[str]:
    if boleto.valor_juros > 0:
        return ["1", formatar_data(boleto.data_vencimento + timedelta(days=1)), formatar_valor(boleto.valor_juros)]
    return ["0", "00000000", formatar_valor(0)]


def _desconto(boleto: BoletoData) -> list[str]:
    if boleto.valor_desconto > 0:
        return ["1", formatar_data(boleto.data_vencimento), formatar_valor(boleto.valor_desconto)]
    return ["0", "00000000", formatar_valor(0)]


def _segmento_p(config: CnabConfig, boleto: BoletoData, sequencial: int) -> str:
    partes = [
        config.banco.value,                              # 001-003
        pad_left(LOTE_COBRANCA, 4),                      # 004-007
        "3",                                             # 008
        pad_left(sequencial, 5),                         # 009-013
        "P",                                             # 014
        " ",                                             # 015
        "01",                                            # 016-017 entrada de titulo
        *_conta_corrente(config),                        # 018-037
        _alfa(boleto.nosso_numero, 20),                  # 038-057
        pad_left(config.carteira or "1", 1),             # 058 carteira
        "1",                                             # 059 cadastramento
        "1",                                             # 060 tipo documento
        "2",                                             # 061 emissao pelo cliente
        "2",                                             # 062 distribuicao pelo cliente
        _alfa(boleto.numero_documento, 15),              # 063-077
        formatar_data(boleto.data_vencimento),           # 078-085
        formatar_valor(boleto.valor),                    # 086-100
        "00000",                                         # 101-105 agencia cobradora
        " ",                                             # 106
        "02",                                            # 107-108 especie: DM
        "A",                                             # 109 aceite
        formatar_data(boleto.data_emissao),              # 110-117
        *_juros(boleto),                                 # 118-141
        *_desconto(boleto),                              # 142-165
        formatar_valor(0),                               # 166-180 IOF
        formatar_valor(0),                               # 181-195 abatimento
        _alfa(boleto.numero_documento, 25),              # 196-220 uso da empresa
        "3",                                             # 221 nao protestar
        "00",                                            # 222-223
        "1",                                             # 224 baixa/devolucao
        "060",                                           # 225-227 prazo baixa
        "09",                                            # 228-229 moeda: real
        "0" * 10,                                        # 230-239 contrato
        " ",                                             # 240
    ]
    return "".join(partes)


def _segmento_q(config: CnabConfig, boleto: BoletoData, sequencial: int) -> str:
    sacado = boleto.sacado
    partes = [
        config.banco.value,                              # 001-003
        pad_left(LOTE_COBRANCA, 4),                      # 004-007
        "3",                                             # 008
        pad_left(sequencial, 5),                         # 009-013
        "Q",                                             # 014
        " ",                                             # 015
        "01",                                            # 016-017
        _tipo_inscricao(sacado.documento),               # 018
        _num(sacado.documento, 15),                      # 019-033
        _alfa(sacado.nome, 40),                          # 034-073
        _alfa(sacado.endereco, 40),                      # 074-113
        _alfa(sacado.bairro, 15),                        # 114-128
        _num(sacado.cep, 8),                             # 129-136
        _alfa(sacado.cidade, 15),                        # 137-151
        _alfa(sacado.uf, 2),                             # 152-153
        "0",                                             # 154 sacador/avalista
        "0" * 15,                                        # 155-169
        " " * 40,                                        # 170-209
        "000",                                           # 210-212 banco correspondente
        " " * 20,                                        # 213-232 nosso numero correspondente
        " " * 8,                                         # 233-240
    ]
    return "".join(partes)


def _trailer_lote(config: CnabConfig, quantidade_titulos: int, valor_total: Decimal) -> str:
    partes = [
        config.banco.value,                              # 001-003
        pad_left(LOTE_COBRANCA, 4),                      # 004-007
        "5",                                             # 008
        " " * 9,                                         # 009-017
        pad_left(2 + 2 * quantidade_titulos, 6),         # 018-023 registros do lote
        pad_left(quantidade_titulos, 6),                 # 024-029 cobranca simples
        formatar_valor(valor_total, 17),                 # 030-046
        "0" * 6,                                         # 047-052 vinculada
        "0" * 17,                                        # 053-069
        "0" * 6,                                         # 070-075 caucionada
        "0" * 17,                                        # 076-092
        "0" * 6,                                         # 093-098 descontada
        "0" * 17,                                        # 099-115
        " " * 8,                                         # 116-123 aviso lancamento
        " " * 117,                                       # 124-240
    ]
    return "".join(partes)


def _trailer_arquivo(config: CnabConfig, quantidade_titulos: int) -> str:
    partes = [
        config.banco.value,                              # 001-003
        "9999",                                          # 004-007
        "9",                                             # 008
        " " * 9,                                         # 009-017
        pad_left(1, 6),                                  # 018-023 lotes
        pad_left(4 + 2 * quantidade_titulos, 6),         # 024-029 registros
        "000000",                                        # 030-035 contas conciliacao
        " " * 205,                                       # 036-240
    ]
    return "".join(partes)


def gerar_remessa_cobranca(
    config: CnabConfig,
    boletos: list[BoletoData],
    sequencial_arquivo: int,
    agora: datetime | None = None,
) -> RemessaResult:
    """Gera o arquivo remessa CNAB240 de cobranca.

    Nunca lança: qualquer falha vira RemessaResult(sucesso=False, erros=[...]).
    `agora` e lido uma unica vez e vale para header de arquivo e de lote.
    """
    try:
        if not 1 <= sequencial_arquivo <= SEQUENCIAL_MAXIMO:
            raise CnabValidationError(
                f"Sequencial do arquivo deve estar entre 1 e {SEQUENCIAL_MAXIMO} (recebeu {sequencial_arquivo})"
            )
        agora = agora or agora_brt()
        # soma dos centavos ja arredondados de cada segmento P
        centavos = sum(para_centavos(b.valor) for b in boletos)
        valor_total = Decimal(centavos).scaleb(-2).quantize(Decimal("0.01"))

        linhas = [
            _header_arquivo(config, sequencial_arquivo, agora),
            _header_lote(config, sequencial_arquivo, agora),
        ]
        sequencial = 0
        for boleto in boletos:
            sequencial += 1
            linhas.append(_segmento_p(config, boleto, sequencial))
            sequencial += 1
            linhas.append(_segmento_q(config, boleto, sequencial))
        linhas.append(_trailer_lote(config, len(boletos), valor_total))
        linhas.append(_trailer_arquivo(config, len(boletos)))

        for numero, linha in enumerate(linhas, start=1):
            if len(linha) != TAMANHO_LINHA:
                raise CnabStructuralError(
                    f"Linha {numero} gerada com {len(linha)} caracteres (esperado {TAMANHO_LINHA})"
                )

        nome_arquivo = f"CNAB240_{config.banco.value}_{agora:%Y%m%d}_{pad_left(sequencial_arquivo, 6)}.rem"
        return RemessaResult(
            sucesso=True,
            nome_arquivo=nome_arquivo,
            conteudo="\r\n".join(linhas),
            total_registros=len(boletos),
            valor_total=valor_total,
        )
    except Exception as e:
        logging.warning("Falha ao gerar remessa CNAB240: %s", e)
        return RemessaResult(sucesso=False, erros=[str(e) or type(e).__name__])


def validar_cnab240(conteudo: str) -> ValidacaoResultado:
    """Validacao estrutural de um arquivo CNAB240 (remessa ou retorno)."""
    linhas = [linha for linha in conteudo.replace("\r\n", "\n").split("\n") if linha.strip()]
    if len(linhas) < 4:
        return ValidacaoResultado(
            valido=False,
            erros=[
                "Arquivo deve ter no minimo 4 linhas "
                "(Header Arquivo, Header Lote, Trailer Lote, Trailer Arquivo)"
            ],
        )

    erros = []
    for numero, linha in enumerate(linhas, start=1):
        if len(linha) != TAMANHO_LINHA:
            erros.append(
                f"Linha {numero}: Tamanho invalido ({len(linha)} caracteres, esperado {TAMANHO_LINHA})"
            )

    if linhas[0][7:8] != "0":
        erros.append("Header de Arquivo: Tipo de registro invalido")
    if linhas[-1][7:8] != "9":
        erros.append("Trailer de Arquivo: Tipo de registro invalido")

    banco = linhas[0][0:3]
    divergentes = [n for n, linha in enumerate(linhas, start=1) if linha[0:3] != banco]
    if divergentes:
        erros.append(
            f"Codigo do banco divergente do header nas linhas: {', '.join(map(str, divergentes))}"
        )

    registros_trailer = linhas[-1][23:29]
    if linhas[-1][7:8] == "9" and registros_trailer.isdigit() and int(registros_trailer) != len(linhas):
        erros.append(
            f"Trailer de Arquivo: total de registros {int(registros_trailer)} "
            f"difere das {len(linhas)} linhas do arquivo"
        )

    return ValidacaoResultado(valido=not erros, erros=erros)
