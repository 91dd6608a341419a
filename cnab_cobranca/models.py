from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import CnabValidationError
from .formatacao import apenas_digitos, somente_digitos


class BankCode(str, Enum):
    BANCO_DO_BRASIL = "001"
    SANTANDER = "033"
    CAIXA = "104"
    BRADESCO = "237"
    ITAU = "341"
    SICOOB = "756"

    @property
    def nome(self) -> str:
        return BANK_NAMES[self]


BANK_NAMES = MappingProxyType({
    BankCode.BANCO_DO_BRASIL: "BANCO DO BRASIL S.A.",
    BankCode.SANTANDER: "BANCO SANTANDER S.A.",
    BankCode.CAIXA: "CAIXA ECONOMICA FEDERAL",
    BankCode.BRADESCO: "BANCO BRADESCO S.A.",
    BankCode.ITAU: "BANCO ITAU S.A.",
    BankCode.SICOOB: "BANCO SICOOB S.A.",
})


def banco_por_codigo(codigo: str) -> BankCode:
    """Lança CnabValidationError para bancos fora da lista suportada."""
    try:
        return BankCode(str(codigo).strip().zfill(3))
    except ValueError:
        disponiveis = ", ".join(b.value for b in BankCode)
        raise CnabValidationError(
            f"Banco '{codigo}' nao suportado. Bancos disponiveis: {disponiveis}"
        ) from None


def _validar_documento(v: str) -> str:
    digitos = apenas_digitos(v)
    if len(digitos) not in (11, 14):
        raise ValueError(
            f"Documento deve ser CPF (11 digitos) ou CNPJ (14 digitos) "
            f"(recebeu '{v}' → {len(digitos)} digitos apos remover formatacao)"
        )
    return digitos


class CnabConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    banco: BankCode
    agencia: str
    agencia_digito: str = ""
    conta: str
    conta_digito: str
    convenio: str = ""
    carteira: str = ""
    cedente: str
    cedente_documento: str
    layout: str = "240"

    @field_validator("banco", mode="before")
    @classmethod
    def validar_banco(cls, v):
        if isinstance(v, BankCode):
            return v
        try:
            return banco_por_codigo(v)
        except CnabValidationError as e:
            raise ValueError(str(e)) from None

    @field_validator("agencia", "conta", "convenio", "carteira")
    @classmethod
    def validar_numerico(cls, v: str) -> str:
        v = v.strip()
        if v and not somente_digitos(v):
            raise ValueError(f"Campo deve conter apenas digitos (recebeu '{v}')")
        return v

    @field_validator("cedente_documento")
    @classmethod
    def validar_cedente_documento(cls, v: str) -> str:
        return _validar_documento(v)

    @field_validator("layout")
    @classmethod
    def validar_layout(cls, v: str) -> str:
        if v != "240":
            raise ValueError(f"Layout '{v}' nao suportado (apenas 240)")
        return v


class Sacado(BaseModel):
    nome: str
    documento: str
    endereco: str
    bairro: str = ""
    cidade: str
    uf: str
    cep: str

    @field_validator("documento")
    @classmethod
    def validar_documento(cls, v: str) -> str:
        return _validar_documento(v)

    @field_validator("uf")
    @classmethod
    def validar_uf(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 2 or not v.isalpha():
            raise ValueError(f"UF deve ter 2 letras (recebeu '{v}')")
        return v

    @field_validator("cep")
    @classmethod
    def validar_cep(cls, v: str) -> str:
        digitos = apenas_digitos(v)
        if len(digitos) != 8:
            raise ValueError(f"CEP deve ter 8 digitos (recebeu '{v}')")
        return digitos


class BoletoData(BaseModel):
    id: str = ""
    nosso_numero: str
    numero_documento: str
    data_emissao: date
    data_vencimento: date
    valor: Decimal = Field(ge=0)
    valor_juros: Decimal = Field(default=Decimal("0.00"), ge=0)
    valor_desconto: Decimal = Field(default=Decimal("0.00"), ge=0)
    sacado: Sacado

    @field_validator("nosso_numero")
    @classmethod
    def validar_nosso_numero(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nosso numero nao pode ser vazio")
        return v


class BoletoBarcodeParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    bank_code: BankCode
    moeda: str = Field(default="9", pattern=r"^[0-9]$")
    fator_vencimento: int = Field(ge=0, le=9999)
    valor: Decimal = Field(ge=0)
    campo_livre: str = Field(pattern=r"^[0-9]*$")

    @field_validator("bank_code", mode="before")
    @classmethod
    def validar_banco(cls, v):
        if isinstance(v, BankCode):
            return v
        try:
            return banco_por_codigo(v)
        except CnabValidationError as e:
            raise ValueError(str(e)) from None
