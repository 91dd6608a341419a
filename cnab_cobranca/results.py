from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class BoletoBarcode:
    codigo_barras: str
    linha_digitavel: str


@dataclass(frozen=True, slots=True)
class ValidacaoResultado:
    valido: bool
    erros: list  # list[str]; vazio quando valido


@dataclass(frozen=True, slots=True)
class InfoCodigoBarras:
    banco: str
    moeda: str
    digito_verificador: str
    fator_vencimento: int
    valor: Decimal
    campo_livre: str
    data_vencimento: date


@dataclass(frozen=True, slots=True)
class RemessaResult:
    sucesso: bool
    nome_arquivo: str | None = None
    conteudo: str | None = None
    total_registros: int | None = None  # quantidade de titulos
    valor_total: Decimal | None = None
    erros: list = field(default_factory=list)  # list[str]

    def __post_init__(self):
        if self.sucesso and (self.conteudo is None or self.erros):
            raise ValueError("RemessaResult de sucesso exige conteudo e nenhum erro")
        if not self.sucesso and (not self.erros or self.conteudo is not None):
            raise ValueError("RemessaResult de falha exige erros e nenhum conteudo")


# ---------------------------------------------------------------------------
# Registros do arquivo retorno (um tipo por variante de registro)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HeaderArquivo:
    TIPO: ClassVar[str] = "0"

    linha: int
    banco: str
    tipo_inscricao: str
    documento: str
    nome_empresa: str
    nome_banco: str
    codigo_remessa_retorno: str
    data_geracao: date | None
    hora_geracao: str
    sequencial_arquivo: int
    versao_layout: str


@dataclass(frozen=True, slots=True)
class HeaderLote:
    TIPO: ClassVar[str] = "1"

    linha: int
    banco: str
    lote: int
    tipo_operacao: str
    tipo_servico: str
    versao_layout: str
    documento: str
    nome_empresa: str
    numero_retorno: int
    data_gravacao: date | None
    data_credito: date | None


@dataclass(frozen=True, slots=True)
class DetalheT:
    TIPO: ClassVar[str] = "3"
    SEGMENTO: ClassVar[str] = "T"

    linha: int
    banco: str
    lote: int
    sequencial: int
    codigo_ocorrencia: str
    descricao_ocorrencia: str
    agencia: str
    conta: str
    nosso_numero: str
    carteira: str
    seu_numero: str
    data_vencimento: date | None
    valor_titulo: Decimal
    identificacao_titulo: str
    codigo_moeda: str


@dataclass(frozen=True, slots=True)
class DetalheU:
    TIPO: ClassVar[str] = "3"
    SEGMENTO: ClassVar[str] = "U"

    linha: int
    banco: str
    lote: int
    sequencial: int
    codigo_ocorrencia: str
    valor_juros_multa: Decimal
    valor_desconto: Decimal
    valor_abatimento: Decimal
    valor_iof: Decimal
    valor_pago: Decimal
    valor_liquido: Decimal
    valor_outras_despesas: Decimal
    valor_outros_creditos: Decimal
    data_ocorrencia: date | None
    data_pagamento: date | None
    valor_tarifa: Decimal
    motivo_rejeicao: str | None  # None quando '0000000000' ou brancos


@dataclass(frozen=True, slots=True)
class TrailerLote:
    TIPO: ClassVar[str] = "5"

    linha: int
    banco: str
    lote: int
    quantidade_registros: int
    quantidade_titulos: int
    valor_total: Decimal


@dataclass(frozen=True, slots=True)
class TrailerArquivo:
    TIPO: ClassVar[str] = "9"

    linha: int
    banco: str
    quantidade_lotes: int
    quantidade_registros: int


RetornoRegistro = HeaderArquivo | HeaderLote | DetalheT | DetalheU | TrailerLote | TrailerArquivo


@dataclass(frozen=True, slots=True)
class RetornoResult:
    sucesso: bool
    banco: str | None = None
    registros: tuple = ()  # tuple[RetornoRegistro, ...] na ordem do arquivo
    total_pagos: int = 0
    total_rejeitados: int = 0
    valor_total: Decimal = Decimal("0.00")
    erros: list = field(default_factory=list)  # list[str]


@dataclass(frozen=True, slots=True)
class TituloPago:
    nosso_numero: str
    seu_numero: str | None
    valor_pago: Decimal
    data_pagamento: date | None
    valor_tarifa: Decimal | None
