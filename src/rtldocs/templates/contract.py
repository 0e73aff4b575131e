"""Built-in website design contract template and its content generators."""

from __future__ import annotations

from typing import Any, Mapping

from ..core.localization import (
    DATE_SENTINEL,
    format_currency,
    format_number,
    to_jalali,
    to_persian_digits,
)
from ..core.models import ContractRecord, DocumentKind
from .model import (
    Article,
    FooterConfig,
    HeaderConfig,
    PartyConfig,
    RenderAs,
    SignaturesConfig,
    TemplateConfig,
)
from .payments import split_installments
from .registry import content_generator

DEFAULT_COMPANY_NAME = "BEHET"
DEFAULT_PHONE = "۰۲۱۹۱۰۹۰۰۰۵"
DEFAULT_ADDRESS = "تهران، بزرگراه مدرس، الهیه، خیابان بیدار، برج جم، پلاک ۵ واحد ۲"
DEFAULT_CONTRACTOR = "تیم واحد مدیا (بهت)"
DEFAULT_SIGNATORY = "صابر سلیمانی"

CONTRACT_TYPE_LABELS = {
    "website": "طراحی وب‌سایت",
    "hosting": "هاستینگ",
    "domain": "دامنه",
    "ssl": "گواهینامه SSL",
    "maintenance": "پشتیبانی و نگهداری",
    "seo": "بهینه‌سازی موتور جستجو",
    "other": "سایر",
}

STATUS_LABELS = {
    "draft": "پیش‌نویس",
    "pending": "در انتظار",
    "active": "فعال",
    "expired": "منقضی",
    "terminated": "فسخ شده",
    "cancelled": "لغو شده",
}

YES = "بله"
NO = "خیر"


def contract_type_label(value: str | None) -> str:
    if not value:
        return ""
    return CONTRACT_TYPE_LABELS.get(value, value)


def _client_name(record: ContractRecord) -> str:
    return record.account_name or "کارفرما"


def _months(value: Any) -> str:
    return f"{to_persian_digits(value)} ماه"


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------

@content_generator("contract.info")
def contract_info(record: ContractRecord, params: Mapping[str, Any]) -> list[tuple[str, str]]:
    pairs = [
        ("شماره قرارداد", record.contract_number or DATE_SENTINEL),
        ("تاریخ ایجاد", to_jalali(record.created_at)),
        ("مشتری", record.account_name or DATE_SENTINEL),
    ]
    if record.contract_type:
        pairs.append(("نوع قرارداد", contract_type_label(record.contract_type)))
    if record.start_date:
        pairs.append(("تاریخ شروع", to_jalali(record.start_date)))
    if record.end_date:
        pairs.append(("تاریخ پایان", to_jalali(record.end_date)))
    if record.value:
        pairs.append(("مبلغ", format_currency(record.value, record.currency)))
    if record.status:
        pairs.append(("وضعیت", STATUS_LABELS.get(record.status, record.status)))
    if record.auto_renew:
        pairs.append(("تمدید خودکار", YES))
        if record.renewal_notice_days:
            pairs.append(("یادآور انقضا", f"{to_persian_digits(record.renewal_notice_days)} روز قبل"))
    if record.signed_date:
        pairs.append(("تاریخ امضا", to_jalali(record.signed_date)))
    if record.signed_by:
        pairs.append(("امضا کننده", record.signed_by))
    return pairs


@content_generator("contract.description")
def contract_description(record: ContractRecord, params: Mapping[str, Any]) -> str:
    return (record.description or "").strip()


@content_generator("contract.details")
def contract_details(record: ContractRecord, params: Mapping[str, Any]) -> list[tuple[str, str]]:
    rows: list[tuple[str, Any]] = [
        ("نام دامنه", record.domain_name),
        ("نوع هاستینگ", record.hosting_type),
        ("مدت هاستینگ (ماه)", record.hosting_duration),
        (
            "گواهینامه SSL",
            None if record.ssl_certificate is None else ("شامل" if record.ssl_certificate else NO),
        ),
        ("مدت پشتیبانی (ماه)", record.support_duration),
        ("پکیج SEO", record.seo_package),
        ("تعداد صفحات سایت", record.website_pages),
        ("زبان‌های سایت", record.website_languages),
        ("شرایط پرداخت", record.payment_terms),
        ("روزهای تحویل", record.delivery_days),
        ("ضمانت (ماه)", record.warranty_months),
    ]
    return [
        (label, to_persian_digits(value) if isinstance(value, int) else str(value))
        for label, value in rows
        if value not in (None, "")
    ]


@content_generator("contract.parties")
def contract_parties(record: ContractRecord, params: Mapping[str, Any]) -> str:
    signed = to_jalali(record.signed_date or record.start_date or record.created_at, persian_digits=True)
    when = "تاریخ قرارداد" if signed == DATE_SENTINEL else signed
    client = _client_name(record)
    if record.client_national_id:
        client = f"{client} با کد ملی {to_persian_digits(record.client_national_id)}"
    contractor = record.contractor_name or params.get("contractor_name") or DEFAULT_CONTRACTOR
    project = record.project_title or record.title or "طراحی وب‌سایت"
    return (
        f"در تاریخ {when} قرارداد طراحی سایت {project} بین {client} "
        f"(که در این قرارداد کارفرما نامیده می‌شود) و {contractor} "
        "(که در این قرارداد مجری نامیده می‌شود) منعقد گردید. "
        "طرفین متعهد به اجرای مفاد این قرارداد می‌باشند."
    )


@content_generator("contract.subject")
def contract_subject(record: ContractRecord, params: Mapping[str, Any]) -> list[str]:
    items: list[str] = []
    package = record.package_name or params.get("package_name")
    if package:
        items.append(f"پکیج: {package}")
    items.extend(params.get("items", []))
    support = record.support_duration or params.get("support_months", 6)
    items.append(
        f"{_months(support)} پشتیبانی از زمان تحویل پروژه "
        "(پشتیبانی فنی مشکلات سایت، سایر موارد جداگانه می‌باشد)"
    )
    items.append(record.website_languages or params.get("languages", ""))
    items.extend(record.custom_items)
    return [item for item in items if item]


@content_generator("contract.duration")
def contract_duration(record: ContractRecord, params: Mapping[str, Any]) -> str:
    days = record.execution_days or record.delivery_days or params.get("execution_days", 20)
    months = record.validity_months or params.get("validity_months", 6)
    return (
        f"مدت زمان اولیه اجرا و تحویل پروژه {to_persian_digits(days)} روز کاری از تاریخ شروع "
        "می‌باشد، مشروط بر اینکه محتوای لازمه توسط کارفرما تامین شده باشد. "
        "تاریخ شروع پروژه منوط به پرداخت اولیه کارفرما می‌باشد."
        "\n\n"
        f"اعتبار این قرارداد {_months(months)} از تاریخ امضا می‌باشد. در صورت عدم تامین "
        "محتوای لازمه و شروع پروژه توسط کارفرما در این مدت و در صورت افزایش قیمت خدمات "
        "طراحی، کارفرما موظف به پرداخت مابه‌التفاوت بر اساس مبلغ کل قرارداد می‌باشد."
    )


@content_generator("contract.amount")
def contract_amount(record: ContractRecord, params: Mapping[str, Any]) -> str:
    schedule = split_installments(
        record.value or 0,
        ratio=record.first_payment_ratio,
        count=record.installment_count,
        first_payment=record.first_payment,
        installments=record.remaining_payments,
    )

    def money(amount: int) -> str:
        return format_currency(amount, record.currency)

    languages = record.website_languages or params.get("amount_languages", "")
    scope = f"برای طراحی و پیاده‌سازی سایت {languages}".rstrip()
    count = len(schedule.installments)
    terms = record.payment_terms or f"{to_persian_digits(count + 1)} قسط"
    if schedule.equal_installments:
        each = f"به صورت {to_persian_digits(count)} قسط مساوی، هر کدام {money(schedule.installments[0])}"
    else:
        listed = "، ".join(money(p) for p in schedule.installments)
        each = f"به صورت {to_persian_digits(count)} قسط به ترتیب {listed}"
    return (
        f"مبلغ کل این قرارداد {money(schedule.total)} {scope} مطابق با ویژگی‌ها و "
        "تعهدات ذکر شده در قرارداد می‌باشد."
        "\n\n"
        f"مبلغ قرارداد به صورت {terms} پرداخت می‌شود. قسط اول همزمان با امضای قرارداد "
        f"به مبلغ {money(schedule.first_payment)} می‌باشد. مابقی مبلغ قرارداد به مبلغ "
        f"{money(schedule.remaining)} {each}، پس از اتمام طراحی و تحویل نهایی سایت "
        "پرداخت می‌شود."
    )


@content_generator("contract.support")
def contract_support(record: ContractRecord, params: Mapping[str, Any]) -> str:
    months = record.support_duration or params.get("support_months", 6)
    return (
        f"سایت طراحی شده دارای {_months(months)} پشتیبانی از طرف مجری می‌باشد. "
        "پس از این مدت، قرارداد جدیدی برای خدمات مدیریت و پشتیبانی سایت باید با "
        "مجری منعقد شود."
    )


@content_generator("contract.client_name")
def contract_client_name(record: ContractRecord, params: Mapping[str, Any]) -> str:
    return _client_name(record)


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------

SUBJECT_ITEMS = [
    "طراحی صفحه اصلی مطابق با هویت سازمانی و تجارت بین‌الملل",
    "طراحی صفحات درباره ما، تماس با ما و همکاری با ما جهت اخذ نمایندگی",
    "طراحی صفحات بلاگ و FAQ (سوالات متداول)",
    "طراحی صفحات تخصصی محصول (آنالیز محصول و درخواست محصول) - ده (۱۰) محصول به عنوان "
    "نمونه بارگذاری می‌شود مابقی به عهده کارفرما می‌باشد. لذا آموزش‌های لازمه برای "
    "کارفرما ارسال خواهد شد.",
    "طراحی فرم پاپ آپ مشاوره و درخواست پشتیبانی (CTA)",
    "ایجاد ۶ مقاله سئو شده",
]

CONTRACTOR_OBLIGATIONS = [
    "انجام کلیه فعالیت‌های طراحی مربوط به موضوع قرارداد و پذیرش مسئولیت کیفیت و کمیت و اجرای به موقع پروژه",
    "حفظ امانت و نگهداری اموال و اسناد ارائه شده توسط کارفرما و استفاده بهینه از آن‌ها برای موضوع قرارداد",
    "مجری حق ارائه اسناد، اطلاعات و داده‌های در اختیار خود را به اشخاص حقیقی یا حقوقی دیگر ندارد",
    "آدرس سایت به صورت مستقیم توسط کارفرما انتخاب می‌شود و پس از تایید قابل ویرایش نیست",
    "مجری در خصوص دامنه‌های مشابه یا دامنه‌های از قبل رزرو شده توسط دیگران تعهدی ندارد",
    "مجری موظف است لیست محتوا و اطلاعات درخواستی را برای کارفرما تهیه و ارائه نماید",
    "مجری موظف است هاستینگی را انتخاب نماید که دارای تاییدیه‌های لازمه و فایروال برای جلوگیری از نفوذ و مشکلات امنیتی باشد",
    "طراحی اولیه سایت باید به صورت پیش‌نمایش توسط کارفرما تایید شود و سپس آپلود نهایی انجام شود",
    "پس از اتمام پروژه و پرداخت کامل مبلغ قرارداد توسط کارفرما، مجری موظف است کلیه اطلاعات لاگین سایت و پنل مدیریت هاست/دامنه را به کارفرما ارائه نماید",
]

CLIENT_OBLIGATIONS = [
    "ارائه اسناد لازمه برای طراحی سایت به طراح و پرداخت مبلغ قرارداد",
    "کارفرما حق انتقال حقوق طراحی سایت در حین اجرا و پشتیبانی به دیگران را ندارد",
    "کلیه محتوای سایت، مسائل حقوقی و مالی مربوط به فروش کالا در سایت، تماما بر عهده کارفرما می‌باشد",
    "کارفرما متعهد به رعایت کلیه قوانین کسب و کار اینترنتی می‌باشد",
    "کلیه مسئولیت‌های مربوط به روش فروش، قیمت‌گذاری و غیره بر عهده کارفرما می‌باشد",
]

DISPUTE_TEXT = (
    "در صورت بروز هرگونه اختلاف بین طرفین، ابتدا سعی در حل و فصل دوستانه خواهد شد. "
    "در صورت عدم توافق، اختلاف از طریق داوری در تهران حل و فصل خواهد شد. داوری به "
    "زبان فارسی انجام می‌شود و رای داور قطعی و لازم الاجرا می‌باشد."
)

TERMINATION_TEXT = (
    "فسخ یک‌طرفه قرارداد بدون علت موجه قابل قبول نیست و طرف فسخ‌کننده موظف به پرداخت "
    "مبلغ {{termination_compensation}} ریال به عنوان خسارت هزینه‌های اولیه می‌باشد. در صورت "
    "بروز حوادث غیرمترقبه (فورس ماژور) مانند بلایای طبیعی، جنگ، تحریم، اعتصاب، قطعی "
    "عمده اینترنت و برق، یا پاندمی، در صورت تداوم بیش از ۶۰ روز، هر یک از طرفین "
    "می‌تواند قرارداد را فسخ نماید و تعهدات تا تاریخ فسخ باید تسویه شود."
)


def contract_template() -> TemplateConfig:
    """A fresh copy of the default website design contract."""
    return TemplateConfig(
        kind=DocumentKind.CONTRACT,
        header=HeaderConfig(
            company_name=DEFAULT_COMPANY_NAME,
            phone=DEFAULT_PHONE,
            address=DEFAULT_ADDRESS,
        ),
        title="قرارداد طراحی سایت",
        subtitle="{{title}}",
        info="contract.info",
        variables={
            "contractor_name": DEFAULT_CONTRACTOR,
            "termination_compensation": format_number(50_000_000),
        },
        articles=[
            Article(title="توضیحات", generator="contract.description", optional=True),
            Article(
                title="جزئیات قرارداد/سایت",
                generator="contract.details",
                render_as=RenderAs.KEY_VALUES,
                optional=True,
            ),
            Article(title="ماده اول - عنوان تنظیم قرارداد طراحی سایت", generator="contract.parties"),
            Article(
                title="ماده دوم - موضوع تنظیم قرارداد",
                generator="contract.subject",
                render_as=RenderAs.BULLETS,
                params={
                    "items": SUBJECT_ITEMS,
                    "support_months": 6,
                    "languages": "۲ زبان اضافه + ۱ زبان انگلیسی پیش‌فرض",
                },
            ),
            Article(
                title="ماده سوم - مدت انجام قرارداد",
                generator="contract.duration",
                params={"execution_days": 20, "validity_months": 6},
            ),
            Article(
                title="ماده چهارم - تعهدات مجری",
                text=CONTRACTOR_OBLIGATIONS,
                render_as=RenderAs.BULLETS,
            ),
            Article(
                title="ماده پنجم - تعهدات کارفرما",
                text=CLIENT_OBLIGATIONS,
                render_as=RenderAs.BULLETS,
            ),
            Article(
                title="ماده ششم - مبلغ قرارداد",
                generator="contract.amount",
                params={"amount_languages": "سه‌زبانه (فارسی و انگلیسی)"},
            ),
            Article(title="ماده هفتم - حل اختلاف", text=DISPUTE_TEXT),
            Article(title="ماده هشتم - فسخ قرارداد", text=TERMINATION_TEXT),
            Article(
                title="ماده نهم - پشتیبانی",
                generator="contract.support",
                params={"support_months": 6},
            ),
        ],
        signatures=SignaturesConfig(
            contractor=PartyConfig(label="امضاء مجری", name=DEFAULT_SIGNATORY),
            client=PartyConfig(label="امضاء کارفرما", resolver="contract.client_name"),
        ),
        footer=FooterConfig(note="این قرارداد به صورت خودکار تولید شده است."),
    )
