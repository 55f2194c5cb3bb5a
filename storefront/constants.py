SORT_ASC = "asc"
SORT_DESC = "desc"

VIEW_CATALOG = "catalog"
VIEW_CART = "cart"
VIEWS = (VIEW_CATALOG, VIEW_CART)

CATALOG_LOADING = "loading"
CATALOG_OK = "ok"
CATALOG_EMPTY = "empty"
CATALOG_ERROR = "error"

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x200?text=Нет+фото"

UNKNOWN_USER_NAME = "Неизвестно"

DEV_USER = {"first_name": "Тестовый", "username": "test_user"}

# тексты интерфейса
MESSAGES = {
    "catalog_error": "Не удалось загрузить каталог. Проверьте подключение к интернету.",
    "catalog_empty": "Каталог товаров пуст. Добавьте товары в таблицу.",
    "not_found": "😕 Товары не найдены",
    "cart_empty": "🛒 Корзина пуста",
    "added": "✅ Добавлено в корзину: {name} ({qty} шт.)",
    "limit_reached": "⚠️ Больше добавить нельзя: {name} уже в корзине ({qty} шт.)",
    "removed": "🗑️ Товар удален из корзины",
    "product_copied": "📋 Данные товара скопированы!",
    "order_copied": "📋 Весь заказ скопирован!",
    "copy_failed": "❌ Ошибка копирования",
    "copy_empty": "❌ Корзина пуста!",
    "checkout_empty": "❌ Добавьте товары в корзину!",
    "sync_warning": "⚠️ Корзина не сохранена на сервере, изменения видны только здесь",
    "sort_label": "Фильтр: По цене {arrow}",
}
