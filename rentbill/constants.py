from zoneinfo import ZoneInfo

from rentbill.models.enums import BillItemType, BillStatus
from rentbill.settings import settings

LOCAL_TZ = ZoneInfo(settings.timezone)

DUE_SOON_DAYS = 7

STATUS_LABELS = {
    BillStatus.DRAFT: "Nháp",
    BillStatus.PENDING: "Chờ thanh toán",
    BillStatus.PAID: "Đã thanh toán",
    BillStatus.OVERDUE: "Quá hạn",
    BillStatus.CANCELLED: "Đã hủy",
}

# Badge variants understood by the dashboard components.
STATUS_COLORS = {
    BillStatus.DRAFT: "outline",
    BillStatus.PENDING: "default",
    BillStatus.PAID: "secondary",
    BillStatus.OVERDUE: "destructive",
    BillStatus.CANCELLED: "outline",
}

# Console styles for the same statuses.
STATUS_STYLES = {
    BillStatus.DRAFT: "dim",
    BillStatus.PENDING: "cyan",
    BillStatus.PAID: "green",
    BillStatus.OVERDUE: "red",
    BillStatus.CANCELLED: "dim",
}

ITEM_TYPE_LABELS = {
    BillItemType.RENT: "Tiền phòng",
    BillItemType.ELECTRIC: "Tiền điện",
    BillItemType.WATER: "Tiền nước",
    BillItemType.SERVICE: "Dịch vụ",
}

GENERIC_ERROR_MESSAGE = "Đã có lỗi xảy ra"
METER_VALIDATION_MESSAGE = "Vui lòng nhập chỉ số mới lớn hơn chỉ số cũ và khác 0"

# Fallback messages per bill endpoint, used when the backend gives nothing better.
ERR_CREATE_BILL = "Không thể tạo hóa đơn"
ERR_PREVIEW_BILLS = "Không thể xem trước hóa đơn"
ERR_LIST_BILLS = "Không thể tải danh sách hóa đơn"
ERR_GET_BILL = "Không thể tải chi tiết hóa đơn"
ERR_UPDATE_BILL = "Không thể cập nhật hóa đơn"
ERR_DELETE_BILL = "Không thể xóa hóa đơn"
ERR_MARK_PAID = "Không thể đánh dấu đã thanh toán"
ERR_GENERATE_BILLS = "Không thể tạo hóa đơn hàng tháng cho toà nhà"
ERR_METER_DATA = "Không thể cập nhật hóa đơn với dữ liệu đồng hồ"
