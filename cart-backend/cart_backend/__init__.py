# Cart Backend
