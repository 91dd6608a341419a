import logging
import re
from decimal import Decimal
from types import MappingProxyType

from .exceptions import CnabStructuralError
from .formatacao import ler_data, ler_inteiro, ler_valor
from .results import (
    DetalheT,
    DetalheU,
    HeaderArquivo,
    HeaderLote,
    RetornoResult,
    TituloPago,
    TrailerArquivo,
    TrailerLote,
)

TAMANHO_LINHA = 240

OCORRENCIAS_COBRANCA = MappingProxyType({
    "02": "Entrada Confirmada",
    "03": "Entrada Rejeitada",
    "04": "Transferência de Carteira/Entrada",
    "05": "Transferência de Carteira/Baixa",
    "06": "Liquidação",
    "07": "Confirmação do Recebimento da Instrução de Desconto",
    "08": "Confirmação do Recebimento do Cancelamento do Desconto",
    "09": "Baixa",
    "10": "Baixa por Pagamento",
    "11": "Títulos em Carteira (Em Ser)",
    "12": "Confirmação Recebimento Instrução de Abatimento",
    "13": "Confirmação Recebimento Instrução de Cancelamento Abatimento",
    "14": "Confirmação Recebimento Instrução Alteração de Vencimento",
    "15": "Franco de Pagamento",
    "17": "Liquidação Após Baixa ou Liquidação Título Não Registrado",
    "19": "Confirmação Recebimento Instrução de Protesto",
    "20": "Confirmação Recebimento Instrução de Sustação/Cancelamento de Protesto",
    "23": "Remessa a Cartório (Aponte em Cartório)",
    "24": "Retirada de Cartório e Manutenção em Carteira",
    "25": "Protestado e Baixado (Baixa por Ter Sido Protestado)",
    "26": "Instrução Rejeitada",
    "27": "Confirmação do Pedido de Alteração de Outros Dados",
    "28": "Débito de Tarifas/Custas",
    "30": "Alteração de Dados Rejeitada",
})

OCORRENCIAS_PAGAS = frozenset({"06", "10", "17"})
OCORRENCIAS_REJEITADAS = frozenset({"03", "26"})

_SEM_MOTIVO = "0000000000"


def descrever_ocorrencia(codigo: str) -> str:
    return OCORRENCIAS_COBRANCA.get(codigo, f"Ocorrência {codigo}")


def _valor_informativo(linha: str, inicio: int, fim: int, numero: int, campo: str) -> Decimal:
    """Valor que nao entra nos totais. Texto do banco nessas colunas vale zero."""
    trecho = linha[inicio:fim]
    try:
        return ler_valor(trecho)
    except CnabStructuralError:
        logging.warning("Linha %d: %s nao numerico ('%s'), considerado zero", numero, campo, trecho)
        return Decimal("0.00")


def _header_arquivo(linha: str, numero: int) -> HeaderArquivo:
    return HeaderArquivo(
        linha=numero,
        banco=linha[0:3],
        tipo_inscricao=linha[17],
        documento=linha[18:32].strip(),
        nome_empresa=linha[72:102].strip(),
        nome_banco=linha[102:132].strip(),
        codigo_remessa_retorno=linha[142],
        data_geracao=ler_data(linha[143:151]),
        hora_geracao=linha[151:157],
        sequencial_arquivo=ler_inteiro(linha[157:163]),
        versao_layout=linha[163:166],
    )


def _header_lote(linha: str, numero: int) -> HeaderLote:
    return HeaderLote(
        linha=numero,
        banco=linha[0:3],
        lote=ler_inteiro(linha[3:7]),
        tipo_operacao=linha[8],
        tipo_servico=linha[9:11],
        versao_layout=linha[13:16],
        documento=linha[18:33].strip(),
        nome_empresa=linha[73:103].strip(),
        numero_retorno=ler_inteiro(linha[183:191]),
        data_gravacao=ler_data(linha[191:199]),
        data_credito=ler_data(linha[199:207]),
    )


def _detalhe_t(linha: str, numero: int) -> DetalheT:
    codigo = linha[15:17]
    return DetalheT(
        linha=numero,
        banco=linha[0:3],
        lote=ler_inteiro(linha[3:7]),
        sequencial=ler_inteiro(linha[8:13]),
        codigo_ocorrencia=codigo,
        descricao_ocorrencia=descrever_ocorrencia(codigo),
        agencia=linha[17:22].strip(),
        conta=linha[23:35].strip(),
        nosso_numero=linha[37:57].strip(),
        carteira=linha[57],
        seu_numero=linha[58:73].strip(),
        data_vencimento=ler_data(linha[73:81]),
        valor_titulo=ler_valor(linha[81:96]),
        identificacao_titulo=linha[105:130].strip(),
        codigo_moeda=linha[130:132],
    )


def _detalhe_u(linha: str, numero: int) -> DetalheU:
    motivo = linha[213:223]
    return DetalheU(
        linha=numero,
        banco=linha[0:3],
        lote=ler_inteiro(linha[3:7]),
        sequencial=ler_inteiro(linha[8:13]),
        codigo_ocorrencia=linha[15:17],
        valor_juros_multa=_valor_informativo(linha, 17, 32, numero, "juros/multa"),
        valor_desconto=_valor_informativo(linha, 32, 47, numero, "desconto"),
        valor_abatimento=_valor_informativo(linha, 47, 62, numero, "abatimento"),
        valor_iof=_valor_informativo(linha, 62, 77, numero, "IOF"),
        valor_pago=ler_valor(linha[77:92]),
        valor_liquido=_valor_informativo(linha, 92, 107, numero, "valor liquido"),
        valor_outras_despesas=_valor_informativo(linha, 107, 122, numero, "outras despesas"),
        valor_outros_creditos=_valor_informativo(linha, 122, 137, numero, "outros creditos"),
        data_ocorrencia=ler_data(linha[137:145]),
        data_pagamento=ler_data(linha[145:153]),
        # tarifa nas posicoes 198-212; alguns bancos usam 181-210 como complemento em texto
        valor_tarifa=_valor_informativo(linha, 197, 212, numero, "tarifa"),
        motivo_rejeicao=None if not motivo.strip() or motivo == _SEM_MOTIVO else motivo.strip(),
    )


def _trailer_lote(linha: str, numero: int) -> TrailerLote:
    return TrailerLote(
        linha=numero,
        banco=linha[0:3],
        lote=ler_inteiro(linha[3:7]),
        quantidade_registros=ler_inteiro(linha[17:23]),
        quantidade_titulos=ler_inteiro(linha[23:29]),
        valor_total=ler_valor(linha[29:46]),
    )


def _trailer_arquivo(linha: str, numero: int) -> TrailerArquivo:
    return TrailerArquivo(
        linha=numero,
        banco=linha[0:3],
        quantidade_lotes=ler_inteiro(linha[17:23]),
        quantidade_registros=ler_inteiro(linha[23:29]),
    )


_PARSERS_REGISTRO = MappingProxyType({
    "0": _header_arquivo,
    "1": _header_lote,
    "5": _trailer_lote,
    "9": _trailer_arquivo,
})

_PARSERS_SEGMENTO = MappingProxyType({
    "T": _detalhe_t,
    "U": _detalhe_u,
})


def _decodificar(linha: str, numero: int):
    tipo = linha[7]
    if tipo == "3":
        parser = _PARSERS_SEGMENTO.get(linha[13])
        if parser is None:
            logging.warning("Linha %d: segmento '%s' ignorado", numero, linha[13])
            return None
        return parser(linha, numero)
    parser = _PARSERS_REGISTRO.get(tipo)
    if parser is None:
        logging.warning("Linha %d: tipo de registro '%s' ignorado", numero, tipo)
        return None
    return parser(linha, numero)


def _pares_t_u(registros):
    """Cada segmento T seguido imediatamente do seu segmento U."""
    for atual, seguinte in zip(registros, registros[1:]):
        if isinstance(atual, DetalheT) and isinstance(seguinte, DetalheU):
            yield atual, seguinte


def parse_retorno_cnab240(conteudo: str) -> RetornoResult:
    """Decodifica um arquivo retorno CNAB240 (CRLF ou LF).

    Linhas com tamanho diferente de 240 sao ignoradas. Nunca lança:
    falhas viram RetornoResult(sucesso=False, erros=[...]).
    """
    try:
        linhas = []
        for numero, linha in enumerate(re.split(r"\r?\n", conteudo), start=1):
            if len(linha) != TAMANHO_LINHA:
                logging.debug("Linha %d ignorada: %d caracteres", numero, len(linha))
                continue
            linhas.append((numero, linha))

        if len(linhas) < 4:
            return RetornoResult(sucesso=False, erros=["Arquivo invalido: menos de 4 linhas"])

        registros = []
        banco = None
        for numero, linha in linhas:
            registro = _decodificar(linha, numero)
            if registro is None:
                continue
            if isinstance(registro, HeaderArquivo):
                banco = registro.banco
            registros.append(registro)

        total_pagos = 0
        total_rejeitados = 0
        valor_total = Decimal("0.00")
        for detalhe_t, detalhe_u in _pares_t_u(registros):
            if detalhe_t.codigo_ocorrencia in OCORRENCIAS_PAGAS:
                total_pagos += 1
                valor_total += detalhe_u.valor_pago
            elif detalhe_t.codigo_ocorrencia in OCORRENCIAS_REJEITADAS:
                total_rejeitados += 1

        return RetornoResult(
            sucesso=True,
            banco=banco,
            registros=tuple(registros),
            total_pagos=total_pagos,
            total_rejeitados=total_rejeitados,
            valor_total=valor_total,
        )
    except Exception as e:
        logging.warning("Falha ao processar retorno CNAB240: %s", e)
        return RetornoResult(sucesso=False, erros=[str(e) or type(e).__name__])


def extrair_titulos_pagos(resultado: RetornoResult) -> list[TituloPago]:
    pagos = []
    for detalhe_t, detalhe_u in _pares_t_u(resultado.registros):
        if detalhe_t.codigo_ocorrencia not in OCORRENCIAS_PAGAS:
            continue
        pagos.append(TituloPago(
            nosso_numero=detalhe_t.nosso_numero,
            seu_numero=detalhe_t.seu_numero or None,
            valor_pago=detalhe_u.valor_pago,
            data_pagamento=detalhe_u.data_pagamento,
            valor_tarifa=detalhe_u.valor_tarifa or None,
        ))
    return pagos
